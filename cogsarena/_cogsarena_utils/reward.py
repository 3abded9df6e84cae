"""Reward computation interface for cogsarena environments.

Environment-specific reward implementations should inherit from BaseReward.
"""

from abc import ABC, abstractmethod


class BaseReward(ABC):
    """Abstract base class for cogsarena reward functions.

    All environment-specific reward classes should inherit from this class
    and implement the compute_reward method.
    """

    def reset(self):
        """Reset any state tracking at episode start."""
        pass

    def reset_agent(self, agent):
        """Reset per-agent reward state at an episode boundary."""
        agent.reward = 0.0

    @abstractmethod
    def compute_reward(self, agent, world) -> float:
        """Compute the reward delta for an agent in the world this tick.

        Args:
            agent: Agent object to compute reward for
            world: World object with agents, targets, bases and events

        Returns:
            float: Reward delta for this tick
        """
        pass
