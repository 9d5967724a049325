"""
Neural System Module

This module implements the phenotype of an organism: the recurrent neural
network built from its genome, pruned of every node that cannot influence an
output, and evaluated once per simulation tick.

Classes:
    NeuralSystem: Executable recurrent network with threshold-gated neurons
"""

import numpy as np
import graphviz  # type: ignore
from typing import Sequence, TYPE_CHECKING

from evobits.activations          import ActivationType, activation_codes
from evobits.phenotype.action     import Action, sample_action
from evobits.phenotype.connection import Connection
from evobits.phenotype.neuron     import Neuron
from evobits.phenotype.ns_shape   import NsShape

if TYPE_CHECKING:
    from evobits.genotype import Genome

SOURCE_VALUE = 0.5

class NeuralSystem:
    """
    A recurrent neural network expressed from a genome.

    The network is stored as an arena: node i of the shape's index space is
    'self._neurons[i]', and its outgoing/incoming edges are lists of
    (node index, weight) pairs. Cycles and self-loops are allowed.

    Construction:
        1. Input nodes (identity, threshold 0), one hidden node per neuron, then
           output nodes (tanh, threshold 0) are allocated.
        2. One edge is added per connection.
        3. Pruning: a depth-first post-order walk of the reversed graph, started
           from every output node, yields the execution order. Nodes it does not
           reach (and that are not inputs) cannot influence any output: they are
           removed, together with their edges.
        4. Classification of the kept nodes:
             - source:         no incoming edge other than self-loops (inputs always are)
             - self-connected: at least one self-loop
             - cleared:        neither source nor memory neuron; reset every tick
        5. Hidden sources start at the constant source value. Output nodes without
           any incoming edge are sources as well, but they stay at 0.

    Evaluation (forward):
        Inputs are written to the input nodes and hidden sources are reset to the
        source value. The values of self-connected nodes are snapshot before the
        cleared nodes are zeroed, so that self-loops read the previous tick's value.
        Nodes are then visited in execution order: each fires (sources pass their
        value through unchanged) and propagates its output along its edges.

    Public Properties:
        shape:           The network shape
        node_count:      Number of nodes kept after pruning
        edge_count:      Number of edges kept after pruning
        execution_order: Node indices in evaluation order
        sources:         Indices of source nodes
        self_connected:  Indices of self-connected nodes
        nodes_to_clear:  Indices of nodes reset every tick

    Public Methods:
        forward(inputs):         Evaluate one tick and return the outputs
        get_action(inputs, rng): Evaluate one tick and sample an action
        node_value(index):       Current accumulator of a node
        set_node_value(index, v) Overwrite the accumulator of a node
        visualize(view):         Render the network with Graphviz

    Class Methods:
        from_genome(genome, shape, source_value): Express a genome
    """

    def __init__(self,
                 neurons     : Sequence[Neuron],
                 connections : Sequence[Connection],
                 shape       : NsShape,
                 source_value: float = SOURCE_VALUE):
        """
        Build and prune the network.

        Parameters:
            neurons:      the hidden neurons, in genome order (as many as shape.hidden)
            connections:  the edges, with global node indices
            shape:        the network shape
            source_value: constant value internal source nodes are held at
        """
        if len(neurons) != shape.hidden:
            raise ValueError(f"Expected {shape.hidden} hidden neurons, got {len(neurons)}")

        self._shape       : NsShape = shape
        self._source_value: float   = source_value

        # Node arena
        self._neurons: list[Neuron] = []
        self._neurons.extend(Neuron(0.0, ActivationType.IDENTITY) for _ in shape.input_range)
        self._neurons.extend(Neuron(n.w, n.activation, n.memory) for n in neurons)
        self._neurons.extend(Neuron(0.0, ActivationType.TANH) for _ in shape.output_range)

        # Edges, as adjacency lists of (node index, weight)
        self._outgoing: list[list[tuple[int, float]]] = [[] for _ in range(shape.total)]
        self._incoming: list[list[tuple[int, float]]] = [[] for _ in range(shape.total)]
        for conn in connections:
            self._outgoing[conn.in_index].append((conn.out_index, conn.w))
            self._incoming[conn.out_index].append((conn.in_index, conn.w))

        self._order: list[int] = self._execution_order()
        self._prune()
        self._classify()

        # Constant-bias initialization of internal sources
        for index in self._internal_sources:
            self._neurons[index].value = source_value

    @classmethod
    def from_genome(cls,
                    genome      : 'Genome',
                    shape       : NsShape,
                    source_value: float = SOURCE_VALUE) -> 'NeuralSystem':
        """
        Express a genome as a neural system.

        Neuron genes become hidden nodes, in genome order; connection genes are
        decoded into edges of a network of the given shape. Connections pointing
        into an empty hidden partition are dropped.

        Parameters:
            genome:       the genome to express
            shape:        the network shape; its hidden count must match the
                          number of neuron genes in the genome
            source_value: constant value internal source nodes are held at

        Returns:
            The neural system

        Raises:
            ValueError: if genome and shape disagree about the number of neurons
        """
        neurons = [Neuron.from_gene(gene) for gene in genome.neuron_genes()]
        if len(neurons) != shape.hidden:
            raise ValueError(f"Genome has {len(neurons)} neuron genes but the "
                             f"shape declares {shape.hidden} hidden nodes")

        connections = []
        for gene in genome.connection_genes():
            conn = Connection.from_gene(gene, shape)
            if conn is not None:
                connections.append(conn)

        return cls(neurons, connections, shape, source_value)

    def _execution_order(self) -> list[int]:
        """
        Depth-first post-order walk of the reversed graph, from each output node.

        Returns:
            The indices of all nodes that can reach an output, each listed once,
            every node after the nodes feeding into it (cycles aside)
        """
        discovered: set[int]  = set()
        order     : list[int] = []

        for start in self._shape.output_range:
            if start in discovered:
                continue
            discovered.add(start)
            stack = [(start, iter(self._incoming[start]))]

            while stack:
                node, predecessors = stack[-1]
                for pred, _ in predecessors:
                    if pred not in discovered:
                        discovered.add(pred)
                        stack.append((pred, iter(self._incoming[pred])))
                        break
                else:
                    stack.pop()
                    order.append(node)

        return order

    def _prune(self) -> None:
        """
        Remove every node not in the execution order (input nodes excepted),
        along with all edges touching it.
        """
        self._alive = np.zeros(self._shape.total, dtype=bool)
        self._alive[self._order] = True
        self._alive[:self._shape.input] = True

        for index in np.flatnonzero(~self._alive):
            self._outgoing[index] = []
            self._incoming[index] = []

        for index in np.flatnonzero(self._alive):
            self._outgoing[index] = [(t, w) for t, w in self._outgoing[index] if self._alive[t]]
            self._incoming[index] = [(s, w) for s, w in self._incoming[index] if self._alive[s]]

    def _classify(self) -> None:
        """
        Compute the per-node masks used at every tick.
        """
        total = self._shape.total
        self._is_source         = np.zeros(total, dtype=bool)
        self._is_self_connected = np.zeros(total, dtype=bool)
        self._is_memory         = np.array([n.memory for n in self._neurons], dtype=bool)

        self._is_source[:self._shape.input] = True

        for index in self._order:
            incoming = self._incoming[index]
            n_self   = sum(1 for source, _ in incoming if source == index)
            if n_self > 0:
                self._is_self_connected[index] = True
            if n_self == len(incoming):
                self._is_source[index] = True

        in_order = np.zeros(total, dtype=bool)
        in_order[self._order] = True
        self._clear_each_tick = in_order & ~self._is_source & ~self._is_memory

        # Output nodes without incoming edges are sources too, but stay at 0
        internal = np.zeros(total, dtype=bool)
        internal[self._shape.hidden_range.start:self._shape.hidden_range.stop] = True
        internal &= self._is_source

        self._internal_sources    : list[int] = np.flatnonzero(internal).tolist()
        self._self_connected_nodes: list[int] = np.flatnonzero(self._is_self_connected).tolist()
        self._cleared_nodes       : list[int] = np.flatnonzero(self._clear_each_tick).tolist()

        # self-loop weights, and the outgoing edges that are not self-loops
        self._self_weights: dict[int, list[float]] = {
            index: [w for t, w in self._outgoing[index] if t == index]
            for index in self._self_connected_nodes}
        self._other_outgoing: dict[int, list[tuple[int, float]]] = {
            index: [(t, w) for t, w in self._outgoing[index] if t != index]
            for index in self._self_connected_nodes}

    @property
    def shape(self) -> NsShape:
        return self._shape

    @property
    def node_count(self) -> int:
        """Number of nodes kept after pruning."""
        return int(self._alive.sum())

    @property
    def edge_count(self) -> int:
        """Number of edges kept after pruning."""
        return sum(len(edges) for edges in self._outgoing)

    @property
    def execution_order(self) -> list[int]:
        return list(self._order)

    @property
    def sources(self) -> set[int]:
        return set(np.flatnonzero(self._is_source & self._alive).tolist())

    @property
    def self_connected(self) -> set[int]:
        return set(self._self_connected_nodes)

    @property
    def nodes_to_clear(self) -> set[int]:
        return set(self._cleared_nodes)

    def node_value(self, index: int) -> float:
        return self._neurons[index].value

    def set_node_value(self, index: int, value: float) -> None:
        self._neurons[index].value = value

    def forward(self, inputs: Sequence[float]) -> np.ndarray:
        """
        Evaluate the network for one tick.

        Parameters:
            inputs: the sensor values, one per input node

        Returns:
            The accumulators of the output nodes (one per output node)

        Raises:
            ValueError: if the number of inputs does not match the number of input nodes
        """
        if len(inputs) != self._shape.input:
            raise ValueError(f"Expected {self._shape.input} inputs, got {len(inputs)}")

        neurons = self._neurons

        # Set sensors, reset internal sources
        for index in self._shape.input_range:
            neurons[index].value = float(inputs[index])
        for index in self._internal_sources:
            neurons[index].value = self._source_value

        # Self-loops must read the value from before this tick's reset
        snapshot = {index: neurons[index].value for index in self._self_connected_nodes}

        for index in self._cleared_nodes:
            neurons[index].value = 0.0

        for index in self._order:
            neuron = neurons[index]

            if self._is_self_connected[index]:
                previous = snapshot[index]
                for w in self._self_weights[index]:
                    neuron.value += previous * w
                output = neuron.fire()
                edges  = self._other_outgoing[index]
            else:
                output = neuron.value if self._is_source[index] else neuron.fire()
                edges  = self._outgoing[index]

            for target, w in edges:
                neurons[target].value += output * w

        return np.array([neurons[index].value for index in self._shape.output_range])

    def get_action(self, inputs: Sequence[float], rng: np.random.Generator) -> Action:
        """
        Evaluate the network for one tick and sample an action from its outputs.

        Parameters:
            inputs: the sensor values, one per input node
            rng:    source of randomness

        Returns:
            The chosen action
        """
        return sample_action(self.forward(inputs), rng)

    def visualize(self, view: bool = False) -> graphviz.Digraph:
        """
        Visualize the pruned network using Graphviz.

        Parameters:
            view: If True, automatically open the visualization after rendering

        Returns:
            graphviz.Digraph object representing the network
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')

        base_attrs = {'color': 'black', 'style': 'filled', 'shape': 'circle', 'penwidth': '0.5',
                      'fontsize': '5', 'width': '0.5', 'height': '0.5', 'fixedsize': 'true'}

        def label(index: int) -> str:
            neuron = self._neurons[index]
            tags   = ''.join(tag for tag, flag in (('S', self._is_source[index]),
                                                   ('R', self._is_self_connected[index]),
                                                   ('M', neuron.memory)) if flag)
            return (f"{index}\\n{activation_codes[neuron.activation]}"
                    f"\\nt={neuron.w:.2f}{' ' + tags if tags else ''}")

        ranges = (('cluster_input' , 'Inputs' , 'source', 'lightgrey', self._shape.input_range),
                  ('cluster_hidden', 'Hidden' , 'same'  , 'lightblue', self._shape.hidden_range),
                  ('cluster_output', 'Outputs', 'sink'  , 'white'    , self._shape.output_range))

        for name, title, rank, color, indices in ranges:
            alive = [i for i in indices if self._alive[i]]
            if not alive:
                continue
            with dot.subgraph(name=name) as cluster:
                cluster.attr(rank=rank, label=title, style='invisible')
                for index in alive:
                    cluster.node(str(index), label=label(index), fillcolor=color, **base_attrs)

        for source, edges in enumerate(self._outgoing):
            for target, w in edges:
                dot.edge(str(source), str(target), label=f"{w:+.2f}",
                         color='blue' if w > 0 else 'red',
                         fontsize='5', penwidth='0.5', arrowsize='0.5')

        if view:
            dot.view(cleanup=True)

        return dot

    def __str__(self):
        lines = [f"NeuralSystem(shape={self._shape}, nodes={self.node_count}, edges={self.edge_count})"]
        for index in self._order:
            targets = ", ".join(f"{t}:{w:+.2f}" for t, w in self._outgoing[index])
            lines.append(f"  {index:3d} {self._neurons[index]!r} -> [{targets}]")
        return "\n".join(lines)
