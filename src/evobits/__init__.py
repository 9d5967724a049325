"""
evobits - Evolving populations of bit-string encoded recurrent neural networks.

Every organism of the population carries a genome: a sequence of 32-bit genes,
each describing either a neuron or a connection. The genome is expressed as a
small recurrent neural network, pruned of everything that cannot reach an output,
which is evaluated once per simulation tick to choose the organism's next action.
Genomes replicate with point mutations, insertions and deletions, and the
population is partitioned into species by genetic distance.

Main components:
- genotype: Genetic encoding (genes and genomes)
- phenotype: Neural system expression and evaluation, actions, organisms
- pool: Population and speciation management
- run: Configuration and simulation driver
- activations: Activation functions for neurons

Example:
    >>> from evobits import Config, Simulation
    >>> config = Config("config.ini")
    >>> class MySimulation(Simulation):
    ...     def _read_sensors(self, organism):
    ...         # Return one value per input node
    ...         pass
    >>> simulation = MySimulation(config)
    >>> simulation.run()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from evobits.run.config              import Config
from evobits.run.simulation          import Simulation
from evobits.genotype.gene           import Gene
from evobits.genotype.genome         import Genome
from evobits.phenotype.ns_shape      import NsShape
from evobits.phenotype.neural_system import NeuralSystem
from evobits.phenotype.action        import Action, Dir
from evobits.phenotype.organism      import Organism
from evobits.pool.population         import Population
from evobits.pool.species            import SpeciesRegistry, cluster

__all__ = [
    "Config",
    "Simulation",
    "Gene",
    "Genome",
    "NsShape",
    "NeuralSystem",
    "Action",
    "Dir",
    "Organism",
    "Population",
    "SpeciesRegistry",
    "cluster",
]
