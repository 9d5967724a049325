"""
Unit tests for basic activation functions.

Tests the activation functions in src/evobits/activations/basic_activations.py
"""

import pytest
import numpy as np
from evobits.activations.basic_activations import (
    ActivationType,
    identity_activation,
    tanh_activation,
    sigmoid_activation,
    step_activation,
    gaussian_activation,
    activations,
    activation_functions,
    activation_codes,
)


class TestActivationsDictionary:
    """Test that all activations are accessible via the lookup dictionaries."""

    def test_all_functions_in_dictionary(self):
        """Test that all five activation functions are in the dictionary."""
        for name in ['identity', 'tanh', 'sigmoid', 'step', 'gaussian']:
            assert name in activations, f"{name} not found in activations dictionary"
        assert len(activations) == 5

    def test_every_activation_type_has_function_and_code(self):
        """Test that each ActivationType maps to a function and a 3-letter code."""
        for kind in ActivationType:
            assert callable(activation_functions[kind])
            assert len(activation_codes[kind]) == 3

    def test_gene_encodable_values(self):
        """Test the values of the activation kinds a neuron gene can hold."""
        assert ActivationType.TANH     == 0
        assert ActivationType.SIGMOID  == 1
        assert ActivationType.STEP     == 2
        assert ActivationType.GAUSSIAN == 3


class TestIdentityActivation:
    """Test identity_activation function."""

    def test_scalar(self):
        assert identity_activation(0.0) == 0.0
        assert identity_activation(-3.5) == -3.5

    def test_array(self):
        z = np.array([-2.0, 0.0, 2.0])
        np.testing.assert_array_equal(identity_activation(z), z)


class TestTanhActivation:
    """Test tanh_activation function."""

    def test_matches_numpy(self):
        z = np.array([-2.0, -0.5, 0.0, 0.5, 2.0])
        np.testing.assert_allclose(tanh_activation(z), np.tanh(z))

    def test_odd_function(self):
        assert tanh_activation(-1.3) == pytest.approx(-tanh_activation(1.3))


class TestSigmoidActivation:
    """Test sigmoid_activation function."""

    def test_zero(self):
        assert sigmoid_activation(0.0) == pytest.approx(0.5)

    def test_range(self):
        z = np.linspace(-50, 50, 101)
        out = sigmoid_activation(z)
        assert np.all(out >= 0.0)
        assert np.all(out <= 1.0)

    def test_extreme_values_do_not_overflow(self):
        """Test that huge inputs are clipped instead of overflowing."""
        with np.errstate(over='raise'):
            assert sigmoid_activation(1e6) == pytest.approx(1.0)
            assert sigmoid_activation(-1e6) == pytest.approx(0.0)


class TestStepActivation:
    """Test step_activation function."""

    def test_positive_negative(self):
        assert step_activation(0.3) == 1.0
        assert step_activation(-0.3) == 0.0

    def test_zero_maps_to_zero(self):
        assert step_activation(0.0) == 0.0

    def test_scalar_output_converts_to_float(self):
        """Test that a scalar input gives a value usable as a plain float."""
        assert isinstance(float(step_activation(2.0)), float)


class TestGaussianActivation:
    """Test gaussian_activation function."""

    def test_peak_at_zero(self):
        assert gaussian_activation(0.0) == pytest.approx(1.0)

    def test_symmetric(self):
        assert gaussian_activation(-0.7) == pytest.approx(gaussian_activation(0.7))

    def test_value(self):
        assert gaussian_activation(1.5) == pytest.approx(np.exp(-2.25))
