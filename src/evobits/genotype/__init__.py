"""
Genotype Package

This package implements the genetic encoding of an organism's neural system.

A genome is an ordered sequence of fixed-width (32-bit) genes. Each gene is one
of two tagged variants, sharing the same bit positions with different meanings:
- Connection genes: encode a weighted edge between two nodes
- Neuron genes:     encode a hidden neuron (threshold, activation, memory flag)

Modules:
    gene:   Gene class, decoded field records and weight quantizers
    genome: Genome class

Exported Classes:
    Gene:             A 32-bit gene with its bit-level codec
    ConnectionFields: Decoded fields of a connection gene
    NeuronFields:     Decoded fields of a neuron gene
    Genome:           Ordered sequence of genes
"""

from evobits.genotype.gene   import (Gene, ConnectionFields, NeuronFields,
                                     conn_weight_to_raw, neuron_weight_to_raw)
from evobits.genotype.genome import Genome

__all__ = ['Gene',
           'ConnectionFields',
           'NeuronFields',
           'conn_weight_to_raw',
           'neuron_weight_to_raw',
           'Genome']
