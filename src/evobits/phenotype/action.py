"""
Action Module

This module defines the discrete actions an organism can take, and the
8-way compass directions relative actions are resolved against.

Classes:
    Dir:    Compass direction
    Action: Discrete action chosen by the neural system

Functions:
    sample_action(outputs, rng): Sample an action from network outputs
"""

import numpy as np
from enum import Enum

class Dir(Enum):
    """
    The eight compass directions, with their unit displacement (dx, dy).
    North points towards increasing y.
    """
    N  = ( 0,  1)
    S  = ( 0, -1)
    E  = ( 1,  0)
    W  = (-1,  0)
    NE = ( 1,  1)
    NW = (-1,  1)
    SE = ( 1, -1)
    SW = (-1, -1)

    @classmethod
    def random(cls, rng: np.random.Generator) -> 'Dir':
        return _DIRS[int(rng.integers(len(_DIRS)))]

    def rotate(self) -> 'Dir':
        """Rotate clockwise by 45 degrees."""
        return _CLOCKWISE[self]

    def rotate_counter(self) -> 'Dir':
        """Rotate counterclockwise by 45 degrees."""
        return _COUNTERCLOCKWISE[self]

    def __neg__(self) -> 'Dir':
        dx, dy = self.value
        return Dir((-dx, -dy))

    def to_array(self) -> np.ndarray:
        """
        One-hot style encoding over (N, S, E, W); diagonals set two components.
        """
        dx, dy = self.value
        return np.array([dy > 0, dy < 0, dx > 0, dx < 0], dtype=float)

_DIRS = list(Dir)

_CLOCKWISE = {
    Dir.N : Dir.NE,
    Dir.NE: Dir.E,
    Dir.E : Dir.SE,
    Dir.SE: Dir.S,
    Dir.S : Dir.SW,
    Dir.SW: Dir.W,
    Dir.W : Dir.NW,
    Dir.NW: Dir.N,
    }

_COUNTERCLOCKWISE = {after: before for before, after in _CLOCKWISE.items()}

class Action(Enum):
    """
    Discrete actions, in the order of the neural system outputs they map to.
    """
    HALT           = 0
    MOVE_CONTINUE  = 1
    MOVE_RANDOM    = 2
    MOVE_REVERSE   = 3
    ROTATE         = 4
    ROTATE_COUNTER = 5

    @classmethod
    def from_index(cls, index: int) -> 'Action':
        try:
            return cls(index)
        except ValueError:
            raise ValueError(f"No action with index {index}, expected [0, {len(cls)})") from None

    def resolve_dir(self, curr_dir: Dir, rng: np.random.Generator) -> Dir:
        """
        Resolve the direction of movement this action leads to.

        Parameters:
            curr_dir: the current heading of the organism
            rng:      source of randomness (used by MOVE_RANDOM)

        Returns:
            The new heading

        Raises:
            ValueError: for HALT, which does not move
        """
        if self is Action.MOVE_CONTINUE:
            return curr_dir
        if self is Action.MOVE_RANDOM:
            return Dir.random(rng)
        if self is Action.MOVE_REVERSE:
            return -curr_dir
        if self is Action.ROTATE:
            return curr_dir.rotate()
        if self is Action.ROTATE_COUNTER:
            return curr_dir.rotate_counter()
        raise ValueError(f"Action {self.name} has no direction")

N_ACTIONS = len(Action)

def sample_action(outputs, rng: np.random.Generator) -> Action:
    """
    Sample an action with probability proportional to the network outputs.

    Negative outputs carry no weight. When no output carries any weight,
    the action with index 0 is chosen.

    Parameters:
        outputs: the outputs of a forward pass (one per action)
        rng:     source of randomness

    Returns:
        The sampled action
    """
    weights = np.maximum(np.asarray(outputs, dtype=float), 0.0)
    total   = weights.sum()
    if not total > 0.0:
        return Action.from_index(0)

    index = int(rng.choice(len(weights), p=weights / total))
    return Action.from_index(index)
