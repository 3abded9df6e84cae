"""cogsarena: team capture-and-return arena for multi-agent RL.

A PettingZoo environment plus the per-tick decision-and-reward core of its
agents: observation encoding, action decoding with a navigation heuristic,
and event-driven reward shaping.

Environments:
    - capture_return_v0: two teams collect targets and return them to base

Example:
    >>> from cogsarena import capture_return_v0
    >>>
    >>> env = capture_return_v0.env()
    >>> obs, info = env.reset(seed=42)
"""

__version__ = "0.1.0"
