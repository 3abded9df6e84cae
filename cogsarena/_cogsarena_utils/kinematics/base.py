"""Abstract base class for agent kinematics models.

This module defines the interface that all kinematic models must implement
to be compatible with cogsarena environments. A kinematics model is the
motion collaborator of the arena core: it receives the Intent resolved
from an agent's action selection and integrates the agent's pose.
"""
import numpy as np
from abc import ABC, abstractmethod
from typing import Tuple


class KinematicsModel(ABC):
    """Abstract base class for agent kinematics models.

    A kinematics model defines:
    1. The state representation (always [x, y, z, yaw] in cogsarena)
    2. How a discrete Intent (move, rotate) maps to motion
    3. How carried load affects motion

    Attributes:
        dt (float): Time step for discrete-time integration (seconds)

    Example:
        >>> class Stationary(KinematicsModel):
        ...     def max_speed(self, load=0):
        ...         return 0.0
        ...
        ...     def step(self, state, intent, load=0):
        ...         return state.copy()
    """

    state_dim = 4

    def __init__(self, dt: float = 0.1):
        """Initialize kinematics model.

        Args:
            dt (float): Time step for integration (default: 0.1 seconds)

        Raises:
            ValueError: If dt is not positive.
        """
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        self.dt = dt

    @abstractmethod
    def max_speed(self, load: int = 0) -> float:
        """Return the top linear speed for a given carried load.

        Args:
            load (int): Number of carried targets.

        Returns:
            float: Speed in world units per second.
        """
        pass

    @abstractmethod
    def step(self, state: np.ndarray, intent, load: int = 0) -> np.ndarray:
        """Compute next state given current state and intent.

        Args:
            state (np.ndarray): Current state [x, y, z, yaw], yaw in degrees
            intent (Intent): Resolved move/rotate intent for this tick
            load (int): Number of carried targets

        Returns:
            np.ndarray: Next state [x', y', z', yaw'] after dt seconds
        """
        pass

    def get_position(self, state: np.ndarray) -> np.ndarray:
        """Extract (x, y, z) position from state."""
        return state[:3]

    def get_orientation(self, state: np.ndarray) -> float:
        """Extract yaw in degrees from state."""
        return float(state[3])

    def get_velocity_bounds(self, load: int = 0) -> Tuple[float, float]:
        """Return (min, max) signed forward speed for a given load."""
        top = self.max_speed(load)
        return -top, top
