"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest
from itertools import count

from evobits.run.config         import Config
from evobits.phenotype.organism import Organism


@pytest.fixture(autouse=True)
def reset_organism_ids():
    """Reset the Organism ID generator so that IDs start from 0 in each test."""
    Organism._id_generator = count(0)
    yield


@pytest.fixture
def rng():
    """Seeded random number generator."""
    return np.random.default_rng(42)


@pytest.fixture
def small_config():
    """Default config, scaled down for fast tests."""
    config = Config()
    config.population_size      = 20
    config.genome_length        = 16
    config.num_connection_genes = 10
    config.num_neuron_genes     = 4
    config.num_inputs           = 3
    config.num_outputs          = 6
    config.max_epochs           = 5
    config.ticks_per_epoch      = 2
    config.max_population       = 40
    config.lifespan             = 3
    config.seed                 = 7
    return config
