"""
Neural System Shape Module

Classes:
    NsShape: Partition of the node-index space into input, hidden and output ranges
"""

from dataclasses import dataclass, field

@dataclass(frozen=True)
class NsShape:
    """
    The shape of a neural system.

    Node indices are partitioned into three contiguous ranges:
        - Input nodes:  [0, input)
        - Hidden nodes: [input, input + hidden)
        - Output nodes: [input + hidden, input + hidden + output)

    The hidden count is the declared capacity; the realized network may use
    fewer hidden nodes once it has been pruned.

    Public Attributes:
        input:  Number of input (sensor) nodes
        hidden: Number of hidden nodes
        output: Number of output (actuator) nodes
        total:  Total number of nodes

    Public Properties:
        input_range:  Range of input node indices
        hidden_range: Range of hidden node indices
        output_range: Range of output node indices
    """
    input : int
    hidden: int
    output: int
    total : int = field(init=False)

    def __post_init__(self):
        if self.input < 1:
            raise ValueError(f"A neural system needs at least one input node, got {self.input}")
        if self.output < 1:
            raise ValueError(f"A neural system needs at least one output node, got {self.output}")
        if self.hidden < 0:
            raise ValueError(f"The number of hidden nodes cannot be negative, got {self.hidden}")
        object.__setattr__(self, 'total', self.input + self.hidden + self.output)

    @property
    def input_range(self) -> range:
        return range(0, self.input)

    @property
    def hidden_range(self) -> range:
        return range(self.input, self.input + self.hidden)

    @property
    def output_range(self) -> range:
        return range(self.input + self.hidden, self.total)
