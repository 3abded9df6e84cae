"""Kinematics models for arena agents.

Available models:
    - TankKinematics: Forward/backward translation with in-place yaw
"""

from cogsarena._cogsarena_utils.kinematics.base import KinematicsModel
from cogsarena._cogsarena_utils.kinematics.tank import TankKinematics

__all__ = [
    "KinematicsModel",
    "TankKinematics",
]
