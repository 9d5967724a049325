import numpy as np
from enum import IntEnum

class ActivationType(IntEnum):
    """
    Activation kinds a neuron can carry.

    The first four values are the ones a neuron gene can encode in its 2-bit
    activation field. IDENTITY is never encoded: it is reserved for input nodes,
    which pass their sensor value through unchanged.
    """
    TANH     = 0
    SIGMOID  = 1
    STEP     = 2
    GAUSSIAN = 3
    IDENTITY = 4

def identity_activation(z):
    return z

def tanh_activation(z):
    return np.tanh(z)

def sigmoid_activation(z):
    z = np.clip(z, -100, 100)   # to prevent under/overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-z))

def step_activation(z):
    return np.heaviside(z, 0.0)

def gaussian_activation(z):
    z = np.clip(z, -100, 100)
    return np.exp(-z * z)

activations = {
    "identity": identity_activation,
    "tanh"    : tanh_activation,
    "sigmoid" : sigmoid_activation,
    "step"    : step_activation,
    "gaussian": gaussian_activation,
    }

# activation kind => function
activation_functions = {
    ActivationType.IDENTITY: identity_activation,
    ActivationType.TANH    : tanh_activation,
    ActivationType.SIGMOID : sigmoid_activation,
    ActivationType.STEP    : step_activation,
    ActivationType.GAUSSIAN: gaussian_activation,
    }

# 3-letter identifiers for each activation function
activation_codes = {
    ActivationType.IDENTITY: "IDN",
    ActivationType.TANH    : "TNH",
    ActivationType.SIGMOID : "SIG",
    ActivationType.STEP    : "STP",
    ActivationType.GAUSSIAN: "GAU",
    }
