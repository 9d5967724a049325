"""
Genome Module

This module implements the Genome class, the ordered sequence of genes
carried by an organism.

Classes:
    Genome: Ordered sequence of 32-bit genes
"""

import numpy as np
from typing import Iterable, Iterator

from evobits.genotype.gene import Gene, TAG_BIT, NEURON_TAG_BIT

class Genome:
    """
    An ordered sequence of genes encoding the neural system of an organism.

    The genome is a sequence, not a set: the same bit pattern may occur more than
    once, and the position of a gene matters (neuron genes are expressed in genome
    order, and genetic distance compares genes position by position).

    A genome is owned by a single organism. Replication never modifies the parent
    genome: it returns a new, independent one.

    Public Attributes:
        genes: The list of genes, in genome order

    Public Methods:
        set_gene_types(n_conn, n_neuron):                Force the variant of the leading genes
        replicate(mutate_p, insert_p, delete_p, rng):    Create a (possibly mutated) copy
        get_distance(other):                             Genetic distance to another genome
        connection_genes():                              The connection genes, in order
        neuron_genes():                                  The neuron genes, in order
        count_connections():                             Number of connection genes
        count_neurons():                                 Number of neuron genes
        copy():                                          An independent copy
        to_array():                                      Flat uint32 dump of the genome

    Class Methods:
        new(length, rng):   A genome of random genes
        from_array(values): A genome from a flat array of 32-bit words
    """

    def __init__(self, genes: Iterable[Gene] = ()):
        """
        Parameters:
            genes: the genes, in genome order
        """
        self.genes: list[Gene] = list(genes)

    @classmethod
    def new(cls, length: int, rng: np.random.Generator) -> 'Genome':
        """
        Create a genome of 'length' independently random genes.

        Parameters:
            length: number of genes
            rng:    source of randomness

        Returns:
            The new genome
        """
        values = rng.integers(0, 1 << 32, size=length, dtype=np.uint64)
        return cls(Gene(int(v)) for v in values)

    @classmethod
    def from_array(cls, values) -> 'Genome':
        """
        Create a genome from a flat sequence of 32-bit words.

        Parameters:
            values: any sequence of integers (a list, a numpy array, ...)
        """
        return cls(Gene(int(v)) for v in values)

    def to_array(self) -> np.ndarray:
        """Return the genome as a flat numpy array of unsigned 32-bit words."""
        return np.array([gene.value for gene in self.genes], dtype=np.uint32)

    def set_gene_types(self, n_conn: int, n_neuron: int) -> None:
        """
        Force the variant of the leading genes, in place.

        The first 'n_conn' genes become connection genes and the next 'n_neuron'
        genes become neuron genes. Only the tag bits are set; all other fields of
        the genes are left as they are.

        Parameters:
            n_conn:   number of leading genes to tag as connections
            n_neuron: number of following genes to tag as neurons

        Raises:
            ValueError: if more genes are requested than the genome holds
        """
        if n_conn < 0 or n_neuron < 0:
            raise ValueError(f"Gene type counts must be non-negative, got {n_conn} and {n_neuron}")
        if n_conn + n_neuron > len(self.genes):
            raise ValueError(f"Cannot type {n_conn} connection and {n_neuron} neuron genes "
                             f"in a genome of {len(self.genes)} genes")

        connection_mask = ~(1 << TAG_BIT)
        neuron_mask     = (1 << TAG_BIT) | (1 << NEURON_TAG_BIT)

        for i in range(n_conn):
            self.genes[i] = Gene(self.genes[i].value & connection_mask)
        for i in range(n_conn, n_conn + n_neuron):
            self.genes[i] = Gene(self.genes[i].value | neuron_mask)

    def replicate(self,
                  mutate_p: float,
                  insert_p: float,
                  delete_p: float,
                  rng     : np.random.Generator) -> 'Genome':
        """
        Create the genome of an offspring.

        Three independent trials are made per call (not per gene), and applied in
        this order:
         + with probability 'mutate_p', one random bit of one random gene is flipped
         + with probability 'insert_p', one random gene is inserted at a random position
         + with probability 'delete_p', one random gene is removed

        Any combination of the three may happen in the same call. Point mutation
        never changes the variant of the mutated gene (see Gene.mutable_bits).

        Parameters:
            mutate_p: probability of a point mutation
            insert_p: probability of a gene insertion
            delete_p: probability of a gene deletion
            rng:      source of randomness

        Returns:
            The new genome; this genome is not modified
        """
        child = self.copy()
        genes = child.genes

        if rng.random() < mutate_p and genes:
            index = int(rng.integers(len(genes)))
            gene  = genes[index]
            genes[index] = gene.flip_bit(int(rng.integers(gene.mutable_bits())))

        if rng.random() < insert_p:
            position = int(rng.integers(len(genes) + 1))
            genes.insert(position, Gene.random(rng))

        if rng.random() < delete_p and genes:
            del genes[int(rng.integers(len(genes)))]

        return child

    def get_distance(self, other: 'Genome') -> float:
        """
        Calculate the genetic distance between this genome and another.

        Genes are compared position by position over the common prefix; every gene
        beyond the shorter genome's length adds a distance of 1. The total is
        normalized by the length of the longer genome and clamped to [0, 1].

        Parameters:
            other: the genome to compare against

        Returns:
            The genetic distance, in [0, 1]
        """
        longest = max(len(self.genes), len(other.genes))
        if longest == 0:
            return 0.0

        distance  = sum(g1.distance(g2) for g1, g2 in zip(self.genes, other.genes))
        distance += abs(len(self.genes) - len(other.genes))

        return min(max(distance / longest, 0.0), 1.0)

    def connection_genes(self) -> list[Gene]:
        return [gene for gene in self.genes if gene.is_connection()]

    def neuron_genes(self) -> list[Gene]:
        return [gene for gene in self.genes if gene.is_neuron()]

    def count_connections(self) -> int:
        return sum(1 for gene in self.genes if gene.is_connection())

    def count_neurons(self) -> int:
        return sum(1 for gene in self.genes if gene.is_neuron())

    def copy(self) -> 'Genome':
        # genes are immutable, a shallow copy of the list is an independent genome
        return Genome(self.genes)

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self) -> Iterator[Gene]:
        return iter(self.genes)

    def __getitem__(self, index: int) -> Gene:
        return self.genes[index]

    def __eq__(self, other):
        if not isinstance(other, Genome):
            return NotImplemented
        return self.genes == other.genes

    def __repr__(self):
        return f"Genome({[gene.value for gene in self.genes]})"

    def __str__(self):
        return "\n".join(str(gene) for gene in self.genes)
