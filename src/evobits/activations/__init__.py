"""
Activations Package

This package provides the activation functions used by the neurons of an
organism's neural system.

Exported:
    ActivationType:       Enumeration of the activation kinds (gene-encodable + identity)
    activations:          Dictionary mapping activation function names to functions
    activation_functions: Dictionary mapping ActivationType to functions
    activation_codes:     Dictionary mapping ActivationType to 3-letter codes
    Individual activation functions: identity_activation, tanh_activation,
                                     sigmoid_activation, step_activation,
                                     gaussian_activation
"""

from evobits.activations.basic_activations import (
    ActivationType,
    activations,
    activation_functions,
    activation_codes,
    identity_activation,
    tanh_activation,
    sigmoid_activation,
    step_activation,
    gaussian_activation
)

__all__ = [
    'ActivationType',
    'activations',
    'activation_functions',
    'activation_codes',
    'identity_activation',
    'tanh_activation',
    'sigmoid_activation',
    'step_activation',
    'gaussian_activation'
]
