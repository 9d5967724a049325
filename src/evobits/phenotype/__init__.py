"""
Phenotype Package

This package turns genomes into executable recurrent neural networks, and
defines the organisms they drive and the actions they choose.

Modules:
    ns_shape:      Sizes of the input, hidden and output partitions of a network
    neuron:        Threshold-gated neuron
    connection:    Decoded connection between two nodes
    neural_system: The executable, pruned recurrent network
    action:        Compass directions and discrete actions
    organism:      Agent combining genome, neural system and simulation state

Exported Classes:
    NsShape:        Shape of a neural system
    Neuron:         A threshold-gated node
    ConnectionType: Which partitions a connection links
    Connection:     A weighted edge with global node indices
    NeuralSystem:   Recurrent network expressed from a genome
    Dir:            Compass direction
    Action:         Discrete action
    Organism:       An agent of the simulation
"""

from evobits.phenotype.ns_shape      import NsShape
from evobits.phenotype.neuron        import Neuron
from evobits.phenotype.connection    import ConnectionType, Connection
from evobits.phenotype.action        import Dir, Action, N_ACTIONS, sample_action
from evobits.phenotype.neural_system import NeuralSystem
from evobits.phenotype.organism      import Organism

__all__ = ['NsShape',
           'Neuron',
           'ConnectionType',
           'Connection',
           'Dir',
           'Action',
           'N_ACTIONS',
           'sample_action',
           'NeuralSystem',
           'Organism']
