"""
Organism Module

This module implements the Organism class, an agent of the simulation: a genome,
the neural system it expresses, and the little state the simulation tracks
about it.

Classes:
    Organism: An agent with genome, neural system, species and heading
"""

import numpy as np
from itertools import count
from typing    import Optional, Sequence, TYPE_CHECKING

from evobits.phenotype.action        import Action, Dir
from evobits.phenotype.neural_system import NeuralSystem
from evobits.phenotype.ns_shape      import NsShape
if TYPE_CHECKING:
    from evobits.genotype   import Genome
    from evobits.run.config import Config

class Organism:
    """
    An organism of the simulated population.

    You can regard an organism as a thin wrapper around the neural system that
    drives it, to which it adds a unique ID, the species it belongs to, the
    direction it is heading, and its age. Energy, position and any other part of
    its relation with the world are left to the simulation.

    The shape of the neural system is derived from the genome: the number of
    input and output nodes comes from the configuration, the number of hidden
    nodes is the number of neuron genes in the genome.

    Public Attributes:
        ID:            Globally unique identifier for this organism
        genome:        The genome the neural system was expressed from
        shape:         Shape of the neural system
        neural_system: The phenotype
        species:       ID of the species the organism belongs to (None if unassigned)
        direction:     Current heading
        age:           Number of epochs lived

    Public Methods:
        distance(other):          Genetic distance to another organism
        get_action(inputs, rng):  Evaluate the neural system and choose an action
        replicate(config, rng):   Create the genome of an offspring

    Class Methods:
        from_genome(genome, config, rng, species): Express a genome as an organism
    """

    _id_generator = count(0)

    def __init__(self,
                 genome       : 'Genome',
                 neural_system: NeuralSystem,
                 direction    : Dir,
                 species      : Optional[int] = None):
        """
        Parameters:
            genome:        the genome the neural system was expressed from
            neural_system: the neural system driving this organism
            direction:     initial heading
            species:       ID of the species the organism belongs to
        """
        self.ID           : int           = next(Organism._id_generator)  # unique ID
        self.genome       : 'Genome'      = genome
        self.neural_system: NeuralSystem  = neural_system
        self.species      : Optional[int] = species
        self.direction    : Dir           = direction
        self.age          : int           = 0

    @property
    def shape(self) -> NsShape:
        return self.neural_system.shape

    @classmethod
    def from_genome(cls,
                    genome : 'Genome',
                    config : 'Config',
                    rng    : np.random.Generator,
                    species: Optional[int] = None) -> 'Organism':
        """
        Create an organism from a genome, with a random initial heading.

        Parameters:
            genome:  the genome of the new organism
            config:  stores configuration parameters
            rng:     source of randomness
            species: ID of the species the organism belongs to
        """
        shape  = NsShape(config.num_inputs, genome.count_neurons(), config.num_outputs)
        system = NeuralSystem.from_genome(genome, shape, config.source_value)
        return cls(genome, system, Dir.random(rng), species)

    def distance(self, other: 'Organism') -> float:
        """
        Calculate the genetic distance between this organism and another.
        """
        return self.genome.get_distance(other.genome)

    def get_action(self, inputs: Sequence[float], rng: np.random.Generator) -> Action:
        return self.neural_system.get_action(inputs, rng)

    def replicate(self, config: 'Config', rng: np.random.Generator) -> 'Genome':
        """
        Create the genome of an offspring of this organism.

        The parent genome is left untouched; the probabilities of mutation, gene
        insertion and gene deletion come from the configuration.

        Returns:
            The genome of the offspring
        """
        return self.genome.replicate(config.mutate_gene_prob,
                                     config.insert_gene_prob,
                                     config.delete_gene_prob,
                                     rng)

    def __str__(self):
        return (f"Organism {self.ID}: species={self.species}, age={self.age}, "
                f"heading={self.direction.name}, genes={len(self.genome)}, "
                f"nodes={self.neural_system.node_count}, edges={self.neural_system.edge_count}")
