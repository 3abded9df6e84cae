"""Capture Return: team capture-and-return arena for cogsarena.

A PettingZoo environment where two teams collect targets, return them to
their base, and freeze opponents with a forward targeting effect.
"""

from cogsarena.capture_return.capture_return import env, raw_env, ArenaConfig, Scenario
from cogsarena.capture_return.capture_return_reward import CaptureReturnReward, RewardWeights

__all__ = ["env", "raw_env", "ArenaConfig", "Scenario", "CaptureReturnReward", "RewardWeights"]
