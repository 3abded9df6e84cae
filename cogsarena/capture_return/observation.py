"""Observation encoding for the capture-and-return arena.

Turns a WorldSnapshot into the fixed-length float32 vector the policy
consumes. The layout is fixed and must stay in this order:

    [v_right, v_forward,                      # 2  agent velocity, local frame
     time_remaining,                          # 1
     heading,                                 # 1  yaw in degrees, [0, 360)
     base_dir_x, base_dir_y, base_dir_z,      # 3  unit (base - agent), local frame
     base_distance,                           # 1
     for each target, in registration order:
        dir_x, dir_y, dir_z,                  # 3  unit (target - agent), local frame
        distance,                             # 1
        carried_by,                           # 1  Team value, 0 if not carried
        in_base,                              # 1  Team value, 0 if in no base
     frozen]                                  # 1  0.0 / 1.0

Total size: 9 + 6 * n_targets
"""
import numpy as np
from gymnasium import spaces

from cogsarena._cogsarena_utils.geometry import (
    heading_degrees,
    safe_normalize,
    to_local,
)

AGENT_FIELDS = 8
TARGET_FIELDS = 6


def observation_size(n_targets: int) -> int:
    """Length of the observation vector for `n_targets` targets."""
    if n_targets < 0:
        raise ValueError(f"n_targets must be non-negative, got {n_targets}")
    return AGENT_FIELDS + TARGET_FIELDS * n_targets + 1


class ObservationEncoder:
    """Encodes snapshots for a fixed target-count configuration.

    Attributes:
        n_targets (int): Number of targets every encoded snapshot must carry.
        obs_dim (int): Length of the produced vector.
    """

    def __init__(self, n_targets):
        self.n_targets = n_targets
        self.obs_dim = observation_size(n_targets)

    def observation_space(self):
        return spaces.Box(low=-np.inf, high=np.inf, shape=(self.obs_dim,), dtype=np.float32)

    def encode(self, snapshot) -> np.ndarray:
        """Build the observation vector for one snapshot.

        Args:
            snapshot (WorldSnapshot): Read-only view of the observing agent.

        Returns:
            np.ndarray: Observation, shape (obs_dim,), dtype float32.

        Raises:
            ValueError: If the snapshot's target count does not match the
                configured one.
        """
        if len(snapshot.targets) != self.n_targets:
            raise ValueError(
                f"Snapshot has {len(snapshot.targets)} targets, "
                f"encoder configured for {self.n_targets}"
            )

        agent = snapshot.agent
        yaw = agent.yaw
        position = agent.position

        local_velocity = to_local(agent.velocity, yaw)
        to_base = snapshot.base.position - position

        values = [
            local_velocity[0],
            local_velocity[2],
            snapshot.time_remaining,
            heading_degrees(yaw),
            *to_local(safe_normalize(to_base), yaw),
            np.linalg.norm(to_base),
        ]

        for target in snapshot.targets:
            relative = target.position - position
            values.extend(to_local(safe_normalize(relative), yaw))
            values.append(np.linalg.norm(relative))
            values.append(float(target.carried_by))
            values.append(float(target.in_base))

        values.append(1.0 if agent.frozen else 0.0)

        obs = np.asarray(values, dtype=np.float32)
        # Headings just below 360 round up to 360.0 in float32
        if obs[3] >= 360.0:
            obs[3] = 0.0
        # Guards against the layout above drifting from observation_size()
        if obs.shape[0] != self.obs_dim:
            raise ValueError(f"Encoded {obs.shape[0]} values, expected {self.obs_dim}")
        return obs
