"""
Neuron Module

Classes:
    Neuron: A threshold-gated node of the neural system
"""

from evobits.activations import ActivationType, activation_functions
from evobits.genotype    import Gene

class Neuron:
    """
    A node of the neural system.

    A neuron accumulates weighted signals into 'value'. When it fires, the
    threshold acts as a hard gate: if the magnitude of the accumulated value
    exceeds it, the value is replaced by its activation and passed on; otherwise
    the neuron outputs nothing at all (0), whatever the accumulated value.

    Public Attributes:
        w:          Firing threshold
        activation: Activation kind
        memory:     Whether the accumulator survives from one tick to the next
        value:      The accumulator

    Public Methods:
        fire(): Apply the threshold gate and the activation function

    Class Methods:
        from_gene(gene): Decode a neuron gene
    """

    __slots__ = ('w', 'activation', 'memory', 'value', '_fn')

    def __init__(self, w: float, activation: ActivationType, memory: bool = False):
        """
        Parameters:
            w:          firing threshold
            activation: activation kind
            memory:     whether the neuron is a memory neuron
        """
        self.w         : float          = w
        self.activation: ActivationType = activation
        self.memory    : bool           = memory
        self.value     : float          = 0.0
        self._fn = activation_functions[activation]

    @classmethod
    def from_gene(cls, gene: Gene) -> 'Neuron':
        """Create the neuron described by a neuron gene."""
        return cls(gene.get_neuron_weight(), gene.get_activation_type(), gene.is_memory())

    def fire(self) -> float:
        """
        Fire the neuron.

        Returns:
            The activated value if |value| exceeds the threshold (the accumulator
            is then replaced by it), 0 otherwise (the accumulator is left as is)
        """
        if abs(self.value) > self.w:
            self.value = float(self._fn(self.value))
            return self.value
        return 0.0

    def __repr__(self):
        return (f"Neuron(w={self.w:.4f}, activation=ActivationType.{self.activation.name}, "
                f"memory={self.memory}, value={self.value:+.4f})")
