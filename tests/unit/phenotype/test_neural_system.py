"""
Unit tests for NeuralSystem class.

Tests cover construction, pruning of nodes that cannot reach an output, node
classification (sources, self-connected nodes, nodes cleared each tick), the
forward pass through cycles, self-loops and memory neurons, expression from a
genome, action sampling and visualization.
"""

import pytest
import numpy as np

from evobits.activations              import ActivationType
from evobits.genotype                 import Gene, Genome, conn_weight_to_raw, neuron_weight_to_raw
from evobits.phenotype.action         import Action
from evobits.phenotype.connection     import Connection, ConnectionType
from evobits.phenotype.neural_system  import NeuralSystem
from evobits.phenotype.neuron         import Neuron
from evobits.phenotype.ns_shape       import NsShape

IN       = ConnectionType.IN
OUT      = ConnectionType.OUT
IN_OUT   = ConnectionType.IN_OUT
INTERNAL = ConnectionType.INTERNAL


def connect(shape, *specs):
    """Build connections from (weight, type, local in index, local out index) tuples."""
    return [Connection.from_local(w, t, i, o, shape) for w, t, i, o in specs]


def tanh_neurons(*thresholds):
    return [Neuron(w, ActivationType.TANH) for w in thresholds]


# ============================================================================
# Test: Pruning and output
# ============================================================================

class TestOutputAndPruning:
    """Shape (3, 2, 1): hidden1 is fed by input 2 but cannot reach the output."""

    @pytest.fixture
    def system(self):
        shape = NsShape(3, 2, 1)
        conns = connect(shape,
                        (1.0, IN , 0, 0),
                        (1.0, IN , 1, 0),
                        (0.3, OUT, 0, 0),
                        (0.3, IN , 2, 1))
        return NeuralSystem(tanh_neurons(0.0, 0.0), conns, shape)

    def test_node_count(self, system):
        assert system.node_count == 5

    def test_edge_count(self, system):
        assert system.edge_count == 3

    def test_sources(self, system):
        assert system.sources == {0, 1, 2}

    def test_execution_order(self, system):
        order = system.execution_order
        assert 4 not in order
        assert order[-1] == 5
        assert order.index(3) > order.index(0)
        assert order.index(3) > order.index(1)

    def test_output(self, system):
        expected = np.tanh(np.tanh(0.5 + 0.8) * 0.3)
        output   = system.forward([0.5, 0.8, 1.0])
        assert output.shape == (1,)
        assert output[0] == pytest.approx(expected, abs=1e-9)

    def test_pruned_input_has_no_effect(self, system):
        first  = system.forward([0.5, 0.8, 1.0])[0]
        second = system.forward([0.5, 0.8, -7.0])[0]
        assert first == pytest.approx(second)

    def test_stateless_without_memory(self, system):
        """Without memory or self-loops, repeated passes give the same output."""
        outputs = [system.forward([0.5, 0.8, 1.0])[0] for _ in range(3)]
        assert outputs[1] == pytest.approx(outputs[0])
        assert outputs[2] == pytest.approx(outputs[0])

    def test_wrong_input_length(self, system):
        with pytest.raises(ValueError):
            system.forward([0.5, 0.8])


class TestOutputNodeOrdering:
    """Shape (1, 3, 1): a chain hidden2 -> hidden1 -> hidden0 -> output, in any connection order."""

    CONNECTIONS = [(1.0, IN      , 0, 0),
                   (0.6, INTERNAL, 1, 0),
                   (0.4, INTERNAL, 2, 1),
                   (0.5, OUT     , 0, 0)]

    @pytest.mark.parametrize("seed", range(5))
    def test_output_independent_of_connection_order(self, seed):
        shape = NsShape(1, 3, 1)
        specs = [self.CONNECTIONS[i] for i in np.random.default_rng(seed).permutation(4)]
        system = NeuralSystem(tanh_neurons(0.0, 0.0, 0.5), connect(shape, *specs), shape)

        assert len(system.sources) == 2

        node1    = np.tanh(0.5 * 0.4)
        node0    = np.tanh(node1 * 0.6 + 0.8)
        expected = np.tanh(node0 * 0.5)
        assert system.forward([0.8])[0] == pytest.approx(expected, abs=1e-9)


# ============================================================================
# Test: Self-loops
# ============================================================================

class TestSelfConnectedSource:
    """A hidden neuron whose only inputs are three self-loops."""

    @pytest.fixture
    def system(self):
        shape = NsShape(1, 1, 1)
        conns = connect(shape,
                        (0.7, INTERNAL, 0, 0),
                        (1.0, INTERNAL, 0, 0),
                        (0.3, INTERNAL, 0, 0),
                        (0.2, OUT     , 0, 0))
        return NeuralSystem(tanh_neurons(0.5), conns, shape)

    def test_classification(self, system):
        assert system.sources == {0, 1}
        assert system.self_connected == {1}
        assert system.nodes_to_clear == {2}

    def test_source_starts_at_source_value(self, system):
        assert system.node_value(1) == 0.5

    def test_output(self, system):
        # the source value feeds the self-loops, on top of itself, before firing
        value    = 0.5 + 0.5 * (0.7 + 1.0 + 0.3)
        expected = np.tanh(np.tanh(value) * 0.2)
        assert system.forward([0.0])[0] == pytest.approx(expected, abs=1e-9)

    def test_output_repeats(self, system):
        """Sources are reset every tick, so the output does not drift."""
        first  = system.forward([0.0])[0]
        second = system.forward([0.0])[0]
        assert first == pytest.approx(second)

    def test_custom_source_value(self):
        shape  = NsShape(1, 1, 1)
        conns  = connect(shape, (1.0, INTERNAL, 0, 0), (1.0, OUT, 0, 0))
        system = NeuralSystem(tanh_neurons(0.0), conns, shape, source_value=0.25)
        assert system.forward([0.0])[0] == pytest.approx(np.tanh(np.tanh(0.5)))


class TestSelfConnected:
    """A self-connected hidden neuron that also receives both inputs."""

    @pytest.fixture
    def system(self):
        shape = NsShape(2, 1, 1)
        conns = connect(shape,
                        (1.2, IN      , 0, 0),
                        (0.9, IN      , 1, 0),
                        (0.7, INTERNAL, 0, 0),
                        (1.0, INTERNAL, 0, 0),
                        (0.3, INTERNAL, 0, 0),
                        (0.2, OUT     , 0, 0))
        return NeuralSystem(tanh_neurons(0.0), conns, shape)

    def test_classification(self, system):
        assert system.sources == {0, 1}
        assert system.self_connected == {2}
        assert system.nodes_to_clear == {2, 3}

    def test_self_loop_reads_previous_value(self, system):
        system.set_node_value(2, 0.74)
        inputs   = [0.9, 0.4]
        value    = 0.74 * (0.7 + 1.0 + 0.3) + inputs[0] * 1.2 + inputs[1] * 0.9
        expected = np.tanh(np.tanh(value) * 0.2)
        assert system.forward(inputs)[0] == pytest.approx(expected, abs=1e-6)

    def test_value_carried_to_next_tick(self, system):
        inputs = [0.9, 0.4]
        system.forward(inputs)
        previous = system.node_value(2)

        value    = previous * 2.0 + inputs[0] * 1.2 + inputs[1] * 0.9
        expected = np.tanh(np.tanh(value) * 0.2)
        assert system.forward(inputs)[0] == pytest.approx(expected, abs=1e-9)


# ============================================================================
# Test: Sources and pruning
# ============================================================================

class TestSourcesAndPruning:
    """Shape (4, 4, 2) with one dangling branch."""

    CONNECTIONS = [(1.0, IN      , 0, 0),   # input to internal
                   (1.0, IN      , 1, 0),
                   (1.0, IN_OUT  , 0, 0),   # input to output
                   (1.0, IN_OUT  , 2, 0),
                   (1.0, INTERNAL, 1, 1),   # self-connected
                   (1.0, INTERNAL, 1, 0),   # internal to internal
                   (1.0, OUT     , 0, 0),   # internal to output
                   (1.0, OUT     , 2, 1),
                   (1.0, IN      , 3, 3)]   # input to internal, unconnected

    @pytest.mark.parametrize("seed", range(5))
    def test_sources_and_pruning(self, seed):
        shape  = NsShape(4, 4, 2)
        specs  = [self.CONNECTIONS[i] for i in np.random.default_rng(seed).permutation(9)]
        system = NeuralSystem(tanh_neurons(0.0, 0.0, 0.0, 0.0), connect(shape, *specs), shape)

        assert system.sources == {0, 1, 2, 3, shape.input + 1, shape.input + 2}
        assert system.node_count == shape.total - 1
        assert system.edge_count == len(self.CONNECTIONS) - 1
        assert shape.input + 3 not in system.execution_order


# ============================================================================
# Test: Memory neurons
# ============================================================================

class TestMemoryNodes:
    """A memory neuron keeps its value from one tick to the next."""

    @pytest.fixture
    def system(self):
        shape = NsShape(1, 1, 1)
        conns = connect(shape, (1.6, IN, 0, 0), (0.4, OUT, 0, 0))
        return NeuralSystem([Neuron(0.0, ActivationType.TANH, memory=True)], conns, shape)

    def test_not_cleared(self, system):
        assert 1 not in system.nodes_to_clear

    def test_second_pass_accumulates(self, system):
        memory   = np.tanh(0.7 * 1.6)
        expected = np.tanh(np.tanh(0.7 * 1.6 + memory) * 0.4)

        system.forward([0.7])
        assert system.forward([0.7])[0] == pytest.approx(expected, abs=1e-6)


# ============================================================================
# Test: Threshold gating
# ============================================================================

class TestThresholdGating:
    """Neurons below their threshold output nothing."""

    def test_below_threshold_blocks_signal(self):
        shape  = NsShape(1, 1, 1)
        conns  = connect(shape, (1.0, IN, 0, 0), (1.0, OUT, 0, 0))
        system = NeuralSystem(tanh_neurons(0.6), conns, shape)

        assert system.forward([0.5])[0] == 0.0
        assert system.forward([0.7])[0] == pytest.approx(np.tanh(np.tanh(0.7)))

    def test_negative_values_pass_by_magnitude(self):
        shape  = NsShape(1, 1, 1)
        conns  = connect(shape, (1.0, IN, 0, 0), (1.0, OUT, 0, 0))
        system = NeuralSystem(tanh_neurons(0.6), conns, shape)

        assert system.forward([-0.7])[0] == pytest.approx(np.tanh(np.tanh(-0.7)))


# ============================================================================
# Test: Degenerate networks
# ============================================================================

class TestDegenerateNetworks:
    """Networks without any path to the outputs still evaluate."""

    def test_no_connections(self):
        shape  = NsShape(2, 2, 3)
        system = NeuralSystem(tanh_neurons(0.1, 0.2), [], shape)

        assert system.node_count == 2 + 3
        assert system.edge_count == 0
        np.testing.assert_array_equal(system.forward([1.0, 2.0]), np.zeros(3))

    def test_direct_input_to_output(self):
        shape  = NsShape(2, 0, 1)
        conns  = connect(shape, (0.5, IN_OUT, 0, 0), (0.25, IN_OUT, 1, 0))
        system = NeuralSystem([], conns, shape)

        assert system.forward([1.0, 2.0])[0] == pytest.approx(np.tanh(0.5 + 0.5))

    def test_hidden_count_mismatch(self):
        with pytest.raises(ValueError):
            NeuralSystem(tanh_neurons(0.0), [], NsShape(1, 2, 1))


# ============================================================================
# Test: Expression from a genome
# ============================================================================

class TestFromGenome:
    """Test NeuralSystem.from_genome."""

    @pytest.fixture
    def genome(self):
        return Genome([Gene.encode_connection(conn_weight_to_raw(1.0), 0, 0, sensor_in=True),
                       Gene.encode_neuron(neuron_weight_to_raw(0.0), 7, ActivationType.TANH),
                       Gene.encode_connection(conn_weight_to_raw(0.5), 0, 0, sensor_out=True),
                       Gene(0b10 << 30)])

    def test_expression(self, genome):
        system = NeuralSystem.from_genome(genome, NsShape(1, 1, 1))
        assert system.node_count == 3
        assert system.edge_count == 2
        assert system.forward([0.8])[0] == pytest.approx(np.tanh(np.tanh(0.8) * 0.5), abs=1e-3)

    def test_neuron_count_mismatch(self, genome):
        with pytest.raises(ValueError):
            NeuralSystem.from_genome(genome, NsShape(1, 2, 1))

    def test_indices_folded_into_partitions(self):
        """Raw indices are taken modulo the size of the partition they point into."""
        genome = Genome([Gene.encode_connection(conn_weight_to_raw(1.0), 5, 0, sensor_in=True),
                         Gene.encode_neuron(0, 0),
                         Gene.encode_neuron(0, 1),
                         Gene.encode_connection(conn_weight_to_raw(1.0), 3, 7, sensor_out=True)])
        system = NeuralSystem.from_genome(genome, NsShape(2, 2, 3))
        # input 5 % 2 = 1 -> hidden 0 (node 2); hidden 3 % 2 = 1 (node 3) -> output 7 % 3 = 1 (node 5)
        assert system.edge_count == 1
        assert system.execution_order == [4, 3, 5, 6]

    def test_connections_into_missing_hidden_layer_dropped(self):
        genome = Genome([Gene.encode_connection(conn_weight_to_raw(1.0), 0, 0, sensor_in=True),
                         Gene.encode_connection(conn_weight_to_raw(1.0), 0, 0, sensor_in=True,
                                                sensor_out=True)])
        system = NeuralSystem.from_genome(genome, NsShape(1, 0, 1))
        assert system.edge_count == 1

    def test_random_genomes_always_build(self, rng):
        for _ in range(50):
            genome = Genome.new(int(rng.integers(0, 40)), rng)
            shape  = NsShape(11, genome.count_neurons(), 6)
            system = NeuralSystem.from_genome(genome, shape)
            output = system.forward(rng.normal(size=11))
            assert output.shape == (6,)
            assert np.all(np.isfinite(output))


# ============================================================================
# Test: Actions and visualization
# ============================================================================

class TestGetAction:
    """Test NeuralSystem.get_action."""

    def test_all_zero_outputs_give_first_action(self, rng):
        system = NeuralSystem([], [], NsShape(2, 0, 6))
        assert system.get_action([1.0, 1.0], rng) is Action.HALT

    def test_single_positive_output(self, rng):
        shape  = NsShape(1, 0, 6)
        conns  = connect(shape, (1.0, IN_OUT, 0, 4))
        system = NeuralSystem([], conns, shape)
        for _ in range(10):
            assert system.get_action([1.0], rng) is Action.ROTATE


class TestVisualize:
    """Test NeuralSystem.visualize."""

    def test_graph_contains_kept_nodes_and_edges(self):
        shape  = NsShape(3, 2, 1)
        conns  = connect(shape, (1.0, IN, 0, 0), (1.0, IN, 1, 0), (0.3, OUT, 0, 0), (0.3, IN, 2, 1))
        system = NeuralSystem(tanh_neurons(0.0, 0.0), conns, shape)

        source = system.visualize().source
        assert '3 -> 5' in source
        assert '0 -> 3' in source
        assert '2 -> 4' not in source
