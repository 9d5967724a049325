"""
Gene Module

This module implements the Gene class, the fixed-width unit of heritable
information. A gene is a single 32-bit word whose bits are read in one of two
ways, depending on its top two bits (the variant tag):

    connection:  0 s o iiiiiii ooooooo wwwwwwwwwwwwwww
                 |  bit 31     = 0 (tag)
                 |  bit 30     = sensor-in flag
                 |  bit 29     = sensor-out flag
                 |  bits 22-28 = raw input index
                 |  bits 15-21 = raw output index
                 |  bits  0-14 = weight

    neuron:      1 1 aa m nnnnnnnnnnnn wwwwwwwwwwwwwww
                 |  bits 30-31 = 11 (tag)
                 |  bits 28-29 = activation kind
                 |  bit 27     = memory flag
                 |  bits 15-26 = neuron index
                 |  bits  0-14 = weight (used as firing threshold)

A gene tagged '10' is neither variant; it is carried along by the genome but
does not express anything in the phenotype.

Classes:
    ConnectionFields: Decoded fields of a connection gene
    NeuronFields:     Decoded fields of a neuron gene
    Gene:             A 32-bit gene with its bit-level codec
"""

import numpy as np
from dataclasses import dataclass

from evobits.activations import ActivationType

GENE_BITS  = 32
GENE_MASK  = 0xFFFFFFFF

TAG_BIT        = 31
NEURON_TAG_BIT = 30

WEIGHT_MASK      = 0x7FFF
WEIGHT_MAX       = WEIGHT_MASK
CONN_WEIGHT_BIAS = 0x4000
CONN_WEIGHT_SCALE = 8191.75

INDEX_MASK        = 0x7F
NEURON_INDEX_MASK = 0xFFF
ACTIVATION_MASK   = 0x3

OUT_INDEX_SHIFT    = 15
IN_INDEX_SHIFT     = 22
SENSOR_OUT_BIT     = 29
SENSOR_IN_BIT      = 30
NEURON_INDEX_SHIFT = 15
MEMORY_BIT         = 27
ACTIVATION_SHIFT   = 28

@dataclass(frozen=True)
class ConnectionFields:
    """The fields of a connection gene, in decoded form."""
    sensor_in : bool
    sensor_out: bool
    in_index  : int
    out_index : int
    weight    : float

@dataclass(frozen=True)
class NeuronFields:
    """The fields of a neuron gene, in decoded form."""
    activation  : ActivationType
    memory      : bool
    neuron_index: int
    threshold   : float

def conn_weight_to_raw(weight: float) -> int:
    """
    Quantize a connection weight into its 15-bit raw representation.
    Weights outside the representable range are clamped to it.
    """
    raw = int(round(weight * CONN_WEIGHT_SCALE + CONN_WEIGHT_BIAS))
    return min(max(raw, 0), WEIGHT_MAX)

def neuron_weight_to_raw(threshold: float) -> int:
    """
    Quantize a neuron threshold into its 15-bit raw representation.
    Thresholds outside [0, 1] are clamped to it.
    """
    raw = int(round(threshold * WEIGHT_MAX))
    return min(max(raw, 0), WEIGHT_MAX)

class Gene:
    """
    A single 32-bit gene.

    The gene is an immutable value: every operation that changes bits (such as
    'flip_bit') returns a new Gene. All accessors are total functions over the
    32-bit word, there is no bit pattern for which decoding fails. Accessors of
    one variant may be called on a gene of the other variant; they then simply
    read the bits at the corresponding positions.

    Public Attributes:
        value: The gene, as an unsigned 32-bit integer

    Public Methods:
        is_connection():        Whether the gene is tagged as a connection
        is_neuron():            Whether the gene is tagged as a neuron
        get_conn_weight():      Decoded connection weight, roughly in [-2, 2]
        get_neuron_weight():    Decoded neuron threshold, in [0, 1]
        get_raw_weight():       The 15-bit raw weight
        is_sensor_in():         Connection input is a sensor (input node)
        is_sensor_out():        Connection output is an actuator (output node)
        get_in_index():         The 7-bit raw input index
        get_out_index():        The 7-bit raw output index
        get_neuron_index():     The 12-bit neuron index
        get_activation_type():  The activation kind of a neuron gene
        is_memory():            Whether a neuron gene describes a memory neuron
        flip_bit(pos):          Copy of the gene with one bit toggled
        mutable_bits():         Bit positions a point mutation may toggle
        distance(other):        Genetic distance to another gene
        decode():               The gene as ConnectionFields, NeuronFields or None

    Class Methods:
        random(rng):            A uniformly random gene
        encode_connection(...): Build a connection gene from its fields
        encode_neuron(...):     Build a neuron gene from its fields
    """

    __slots__ = ('value',)

    def __init__(self, value: int):
        """
        Parameters:
            value: the 32-bit word; higher bits are discarded, negative values
                   are taken in two's complement
        """
        self.value: int = int(value) & GENE_MASK

    @classmethod
    def random(cls, rng: np.random.Generator) -> 'Gene':
        """Draw a gene uniformly at random from all 2^32 bit patterns."""
        return cls(int(rng.integers(0, 1 << GENE_BITS, dtype=np.uint64)))

    @classmethod
    def encode_connection(cls,
                          raw_weight: int,
                          in_index  : int,
                          out_index : int,
                          sensor_in : bool = False,
                          sensor_out: bool = False) -> 'Gene':
        """
        Build a connection gene.

        Parameters:
            raw_weight: 15-bit raw weight (see 'conn_weight_to_raw')
            in_index:   7-bit raw input index
            out_index:  7-bit raw output index
            sensor_in:  whether the connection starts at an input node
            sensor_out: whether the connection ends at an output node
        """
        value  = raw_weight & WEIGHT_MASK
        value |= (out_index & INDEX_MASK) << OUT_INDEX_SHIFT
        value |= (in_index  & INDEX_MASK) << IN_INDEX_SHIFT
        value |= int(bool(sensor_out)) << SENSOR_OUT_BIT
        value |= int(bool(sensor_in))  << SENSOR_IN_BIT
        return cls(value)

    @classmethod
    def encode_neuron(cls,
                      raw_weight  : int,
                      neuron_index: int,
                      activation  : ActivationType = ActivationType.TANH,
                      memory      : bool = False) -> 'Gene':
        """
        Build a neuron gene.

        Parameters:
            raw_weight:   15-bit raw threshold (see 'neuron_weight_to_raw')
            neuron_index: 12-bit neuron index
            activation:   one of the four gene-encodable activation kinds
            memory:       whether the neuron keeps its value across ticks
        """
        if activation == ActivationType.IDENTITY:
            raise ValueError("The identity activation cannot be encoded in a neuron gene")

        value  = raw_weight & WEIGHT_MASK
        value |= (neuron_index & NEURON_INDEX_MASK) << NEURON_INDEX_SHIFT
        value |= int(bool(memory)) << MEMORY_BIT
        value |= (int(activation) & ACTIVATION_MASK) << ACTIVATION_SHIFT
        value |= (1 << TAG_BIT) | (1 << NEURON_TAG_BIT)
        return cls(value)

    def is_connection(self) -> bool:
        return (self.value >> TAG_BIT) & 1 == 0

    def is_neuron(self) -> bool:
        return (self.value >> TAG_BIT) & 1 == 1 and (self.value >> NEURON_TAG_BIT) & 1 == 1

    def get_raw_weight(self) -> int:
        return self.value & WEIGHT_MASK

    def get_conn_weight(self) -> float:
        return (self.get_raw_weight() - CONN_WEIGHT_BIAS) / CONN_WEIGHT_SCALE

    def get_neuron_weight(self) -> float:
        return self.get_raw_weight() / WEIGHT_MAX

    def is_sensor_in(self) -> bool:
        return (self.value >> SENSOR_IN_BIT) & 1 == 1

    def is_sensor_out(self) -> bool:
        return (self.value >> SENSOR_OUT_BIT) & 1 == 1

    def get_in_index(self) -> int:
        return (self.value >> IN_INDEX_SHIFT) & INDEX_MASK

    def get_out_index(self) -> int:
        return (self.value >> OUT_INDEX_SHIFT) & INDEX_MASK

    def get_neuron_index(self) -> int:
        return (self.value >> NEURON_INDEX_SHIFT) & NEURON_INDEX_MASK

    def get_activation_type(self) -> ActivationType:
        return ActivationType((self.value >> ACTIVATION_SHIFT) & ACTIVATION_MASK)

    def is_memory(self) -> bool:
        return (self.value >> MEMORY_BIT) & 1 == 1

    def flip_bit(self, pos: int) -> 'Gene':
        """Return a copy of this gene with the bit at position 'pos' toggled."""
        return Gene(self.value ^ (1 << pos))

    def mutable_bits(self) -> int:
        """
        Number of low bits a point mutation may toggle: positions [0, mutable_bits()).

        Bit 31 is never toggled. Bit 30 is the sensor-in field of a connection
        gene, but part of the variant tag of every other gene, so it is only
        mutable for connections. This keeps the variant of a gene stable.
        """
        return SENSOR_IN_BIT + 1 if self.is_connection() else NEURON_TAG_BIT

    def distance(self, other: 'Gene') -> float:
        """
        Calculate the genetic distance between this gene and another.

        Two connections linking the same (raw) endpoints, or two neurons sharing the
        same activation kind and memory flag, are homologous: their distance is the
        absolute difference of their decoded weights. Two non-coding genes are
        compared field by field as if they were connections. Any other pair is at
        distance 1.

        Parameters:
            other: the gene to compare against

        Returns:
            The distance between the two genes
        """
        # connections and non-coding genes share the connection field layout
        if (not self.is_neuron() and not other.is_neuron() and
            self.is_connection() == other.is_connection()):
            if (self.is_sensor_in()  == other.is_sensor_in()  and
                self.is_sensor_out() == other.is_sensor_out() and
                self.get_in_index()  == other.get_in_index()  and
                self.get_out_index() == other.get_out_index()):
                return abs(self.get_conn_weight() - other.get_conn_weight())

        elif self.is_neuron() and other.is_neuron():
            if (self.get_activation_type() == other.get_activation_type() and
                self.is_memory() == other.is_memory()):
                return abs(self.get_neuron_weight() - other.get_neuron_weight())

        return 1.0

    def decode(self) -> ConnectionFields | NeuronFields | None:
        """
        Decode the gene into the record matching its variant.

        Returns:
            ConnectionFields for a connection gene, NeuronFields for a neuron gene,
            None for a gene tagged as neither
        """
        if self.is_connection():
            return ConnectionFields(sensor_in =self.is_sensor_in(),
                                    sensor_out=self.is_sensor_out(),
                                    in_index  =self.get_in_index(),
                                    out_index =self.get_out_index(),
                                    weight    =self.get_conn_weight())
        if self.is_neuron():
            return NeuronFields(activation  =self.get_activation_type(),
                                memory      =self.is_memory(),
                                neuron_index=self.get_neuron_index(),
                                threshold   =self.get_neuron_weight())
        return None

    def __eq__(self, other):
        if not isinstance(other, Gene):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __repr__(self):
        return f"Gene(0x{self.value:08x})"

    def __str__(self):
        if self.is_connection():
            s_in  = "S" if self.is_sensor_in()  else "H"
            s_out = "A" if self.is_sensor_out() else "H"
            return (f"[C,{s_in}{self.get_in_index():03d}=>"
                    f"{s_out}{self.get_out_index():03d},{self.get_conn_weight():+.2f}]")
        if self.is_neuron():
            memory = ",M" if self.is_memory() else ""
            return (f"[N{self.get_neuron_index():04d},{self.get_activation_type().name},"
                    f"t={self.get_neuron_weight():.2f}{memory}]")
        return f"[-,{self.value:08x}]"
