"""
Pool Package

Population management and speciation.

Exported Classes:
    Population:      The live organisms of a simulation
    Species:         A species with its population counter
    SpeciesRegistry: The live species, and the mint for species IDs

Exported Functions:
    cluster: Greedy threshold clustering of genomes
"""

from evobits.pool.species    import Species, SpeciesRegistry, cluster
from evobits.pool.population import Population

__all__ = ['Population',
           'Species',
           'SpeciesRegistry',
           'cluster']
