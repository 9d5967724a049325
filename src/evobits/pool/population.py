"""
Population Module

This module implements the Population class, the container of all live
organisms of a simulation and of the species they are partitioned into.

Classes:
    Population: The live organisms, with their species bookkeeping
"""

import numpy as np
from joblib import Parallel, delayed
from loguru import logger
from typing import Sequence, TYPE_CHECKING

from evobits.genotype     import Genome
from evobits.phenotype    import Action, Organism, sample_action
from evobits.pool.species import SpeciesRegistry, cluster
if TYPE_CHECKING:
    from evobits.run.config import Config

class Population:
    """
    The population of a simulation.

    The initial organisms have random genomes whose leading genes are typed as
    connection and neuron genes (see Genome.set_gene_types); they are clustered
    into species as soon as they are created. From then on, species membership is
    maintained incrementally through births and deaths, unless the population is
    explicitly reclustered.

    The order of the organisms is the order of the sensor vectors and of the
    outputs of 'compute_outputs' and 'decide_actions'.

    Public Attributes:
        organisms: List of all live organisms
        registry:  The species bookkeeping

    Public Methods:
        compute_outputs(sensors, num_jobs): Evaluate every neural system for one tick
        decide_actions(sensors, num_jobs):  Evaluate every neural system and sample actions
        add_offspring(parent):              Replicate an organism into the population
        remove(organism):                   Remove a dead organism
        recluster():                        Recompute all species from scratch
        species_count():                    Number of live species

    Parallelization of neural system evaluation:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of threads
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self, config: 'Config', rng: np.random.Generator):
        """
        Create the initial organisms, and split them into species.

        Parameters:
            config: Stores configuration parameters
            rng:    Source of randomness, shared with the simulation
        """
        self._config: 'Config'            = config
        self._rng   : np.random.Generator = rng

        genomes = []
        for _ in range(config.population_size):
            genome = Genome.new(config.genome_length, rng)
            genome.set_gene_types(config.num_connection_genes, config.num_neuron_genes)
            genomes.append(genome)

        self.organisms: list[Organism] = [Organism.from_genome(genome, config, rng) for genome in genomes]
        self.registry : SpeciesRegistry = SpeciesRegistry(config.compatibility_threshold)
        self._speciate()

    def _speciate(self) -> None:
        """
        Cluster all organisms and assign them their species.
        """
        assignment, num_species = cluster([o.genome for o in self.organisms],
                                          self._config.compatibility_threshold)
        species_ids = self.registry.assign_clusters(assignment)
        for organism, species_id in zip(self.organisms, species_ids):
            organism.species = species_id

        logger.debug("[Population] {} organisms clustered into {} species",
                     len(self.organisms), num_species)

    def compute_outputs(self, sensors: Sequence[Sequence[float]], num_jobs: int = 1) -> list[np.ndarray]:
        """
        Evaluate the neural system of every organism for one tick.

        Parameters:
            sensors:  one sensor vector per organism, in population order
            num_jobs: number of threads to evaluate the networks with

        Returns:
            The outputs of each neural system, in population order
        """
        if len(sensors) != len(self.organisms):
            raise ValueError(f"Expected {len(self.organisms)} sensor vectors, got {len(sensors)}")

        pairs = zip(self.organisms, sensors)
        if num_jobs == 1:
            return [o.neural_system.forward(s) for o, s in pairs]

        # Threads: each forward pass mutates the network it is called on
        return Parallel(num_jobs, prefer="threads")(delayed(o.neural_system.forward)(s) for o, s in pairs)

    def decide_actions(self, sensors: Sequence[Sequence[float]], num_jobs: int = 1) -> list[Action]:
        """
        Evaluate the neural system of every organism and sample one action for each.

        Sampling runs sequentially, after all networks have been evaluated, so that
        the random stream does not depend on the number of jobs.
        """
        outputs = self.compute_outputs(sensors, num_jobs)
        return [sample_action(output, self._rng) for output in outputs]

    def add_offspring(self, parent: Organism) -> Organism:
        """
        Replicate an organism and add the offspring to the population.

        Parameters:
            parent: the replicating organism

        Returns:
            The offspring
        """
        genome  = parent.replicate(self._config, self._rng)
        child   = Organism.from_genome(genome, self._config, self._rng)
        child.species = self.registry.assign_offspring(parent.species, parent.genome, genome)
        self.organisms.append(child)

        logger.debug("[Population] Organism {} born from {} (species {})", child.ID, parent.ID, child.species)
        return child

    def remove(self, organism: Organism) -> None:
        """
        Remove a dead organism from the population.
        """
        self.organisms.remove(organism)
        self.registry.decrement(organism.species)

        logger.debug("[Population] Organism {} died at age {}", organism.ID, organism.age)

    def recluster(self) -> None:
        """
        Discard the current species and cluster the population from scratch.
        Species IDs are not carried over, and are never reused.
        """
        self._speciate()

    def species_count(self) -> int:
        return self.registry.species_count()

    def __len__(self) -> int:
        return len(self.organisms)

    def __iter__(self):
        return iter(self.organisms)

    def __str__(self):
        return '\n'.join(str(organism) for organism in self.organisms)
