"""
Species Module

This module implements speciation: the partition of a population into clusters
of genetically similar organisms, and the bookkeeping that follows species
through births and deaths.

Clustering is greedy and single pass. The first unassigned genome seeds a new
species, and every still-unassigned genome closer than the threshold to that
seed joins it; the process repeats until every genome is assigned. Membership is
decided against the seed only, never against other members, so the outcome
depends on the order of the genomes: two genomes may share a species while being
further apart than the threshold, and a genome just over the threshold from a
seed will not join its species even if it is close to one of its members. This
is a deliberate simplification, not a defect.

Classes:
    Species:         A species ID with its population counter
    SpeciesRegistry: All live species, and the mint for new species IDs

Functions:
    cluster(genomes, threshold): Greedy threshold clustering of genomes
"""

from itertools import count
from loguru    import logger
from typing    import Iterable, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from evobits.genotype import Genome

def cluster(genomes: Sequence['Genome'], threshold: float) -> tuple[list[int], int]:
    """
    Partition genomes into species.

    Parameters:
        genomes:   the genomes to cluster; their order matters
        threshold: a genome joins a species if its distance to the species' seed
                   is strictly below this value

    Returns:
        The species index of each genome (species are numbered from 0, in the
        order their seeds appear), and the number of species
    """
    assignment : list[int | None] = [None] * len(genomes)
    unassigned : list[int]        = list(range(len(genomes)))
    num_species: int              = 0

    while unassigned:
        seed = unassigned[0]
        assignment[seed] = num_species

        remaining = []
        for index in unassigned[1:]:
            if genomes[seed].get_distance(genomes[index]) < threshold:
                assignment[index] = num_species
            else:
                remaining.append(index)

        unassigned   = remaining
        num_species += 1

    return assignment, num_species

class Species:
    """
    A species of organisms.

    Public Attributes:
        id:         Unique species identifier
        population: Number of live organisms belonging to this species
    """

    def __init__(self, species_id: int, population: int = 0):
        """
        Parameters:
            species_id: unique species identifier
            population: initial number of members
        """
        self.id        : int = species_id
        self.population: int = population

    def __repr__(self):
        return f"Species(id={self.id}, population={self.population})"

class SpeciesRegistry:
    """
    The live species of a population.

    Species IDs are minted from a counter and never reused, even after the species
    they were given to goes extinct. A species is removed as soon as its population
    drops to zero.

    The registry is meant to be written by a single caller at a time.

    Public Attributes:
        species:   Dictionary mapping species IDs to Species instances
        threshold: Genetic distance beyond which an offspring founds a new species

    Public Methods:
        new_species(population):       Mint a new species
        assign_clusters(assignment):   Replace all species with a fresh clustering
        increment(species_id):         Record the birth of a member
        decrement(species_id):         Record the death of a member
        assign_offspring(...):         Decide the species of a newborn and record its birth
        population(species_id):        Number of members of a species
        species_count():               Number of live species

    Class Methods:
        from_assignment(assignment, threshold): Registry for the output of 'cluster'
    """

    def __init__(self, threshold: float):
        """
        Parameters:
            threshold: genetic distance beyond which an offspring founds a new species
        """
        self.species      : dict[int, Species] = {}        # species ID => Species instance
        self.threshold    : float              = threshold
        self._id_generator                     = count(0)  # generates species IDs

    @classmethod
    def from_assignment(cls,
                        assignment: Iterable[int],
                        threshold : float) -> tuple['SpeciesRegistry', list[int]]:
        """
        Build a registry from a clustering.

        One species is minted per distinct cluster index, in order of first
        appearance, and its population is the size of the cluster.

        Parameters:
            assignment: cluster index of each organism, as returned by 'cluster'
            threshold:  genetic distance beyond which an offspring founds a new species

        Returns:
            The registry, and the species ID of each organism
        """
        registry = cls(threshold)
        return registry, registry.assign_clusters(assignment)

    def assign_clusters(self, assignment: Iterable[int]) -> list[int]:
        """
        Replace all species with the clusters of a fresh clustering.

        One species is minted per distinct cluster index, in order of first
        appearance. The IDs of the discarded species are not reused.

        Parameters:
            assignment: cluster index of each organism, as returned by 'cluster'

        Returns:
            The species ID of each organism
        """
        self.species = {}
        mapping      = {}
        species_ids  = []
        for index in assignment:
            if index not in mapping:
                mapping[index] = self.new_species().id
            self.increment(mapping[index])
            species_ids.append(mapping[index])
        return species_ids

    def new_species(self, population: int = 0) -> Species:
        """
        Mint a new species with a fresh ID.
        """
        species = Species(next(self._id_generator), population)
        self.species[species.id] = species
        logger.debug("[Species] Minted species {}", species.id)
        return species

    def increment(self, species_id: int) -> None:
        self.species[species_id].population += 1

    def decrement(self, species_id: int) -> None:
        """
        Record the death of a member of a species; remove the species if extinct.
        """
        species = self.species[species_id]
        species.population -= 1
        if species.population <= 0:
            del self.species[species_id]
            logger.debug("[Species] Species {} went extinct", species_id)

    def assign_offspring(self,
                         parent_species: int,
                         parent_genome : 'Genome',
                         child_genome  : 'Genome') -> int:
        """
        Decide the species of a newborn and record its birth.

        The child inherits the species of its parent, unless its genome is further
        than the threshold from the parent's genome, in which case it founds a new
        species. A parent species that is no longer registered is treated the same
        way as a distant child.

        Returns:
            The species ID of the child
        """
        distance = parent_genome.get_distance(child_genome)
        if distance > self.threshold or parent_species not in self.species:
            species_id = self.new_species().id
            logger.debug("[Species] Offspring at distance {:.4f} from its parent founded species {}",
                         distance, species_id)
        else:
            species_id = parent_species

        self.increment(species_id)
        return species_id

    def population(self, species_id: int) -> int:
        species = self.species.get(species_id)
        return species.population if species is not None else 0

    def species_count(self) -> int:
        return len(self.species)

    def __contains__(self, species_id: int) -> bool:
        return species_id in self.species

    def __str__(self):
        return ", ".join(f"{s.id}:{s.population}" for s in self.species.values())
