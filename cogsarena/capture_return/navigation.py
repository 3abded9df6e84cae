"""Navigation heuristic: nearest-target search and dead-band steering.

The heuristic is a single-target, bang-bang controller. Each call asserts
exactly one of rotate or move:

    angle < -dead_band  ->  rotate positive (turn right)
    angle > +dead_band  ->  rotate negative (turn left)
    otherwise           ->  move forward

where `angle` is the signed yaw angle from the horizontal vector-to-target
to the agent's forward axis, in (-180, 180].
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np

from cogsarena._cogsarena_utils.core import Intent, TargetView, Team
from cogsarena._cogsarena_utils.geometry import forward_axis, horizontal, signed_angle


@dataclass(frozen=True)
class NavigationConfig:
    """Tunables of the navigation heuristic.

    Attributes:
        scan_cutoff: Targets at or beyond this distance are never selected.
        dead_band_deg: Half-width of the "close enough, drive" cone in degrees.
    """

    scan_cutoff: float = 200.0
    dead_band_deg: float = 5.0

    def __post_init__(self):
        if self.scan_cutoff <= 0:
            raise ValueError(f"scan_cutoff must be positive, got {self.scan_cutoff}")
        if not 0 <= self.dead_band_deg < 180:
            raise ValueError(f"dead_band_deg must be in [0, 180), got {self.dead_band_deg}")


DEFAULT_NAVIGATION = NavigationConfig()


def is_eligible(target: TargetView, team: Team) -> bool:
    """A target is eligible when nobody carries it and it is not in our base."""
    return target.carried_by == Team.NONE and target.in_base != team


def find_nearest_eligible_target(snapshot, config=DEFAULT_NAVIGATION) -> Optional[TargetView]:
    """Nearest eligible target within the scan cutoff, or None.

    Ties keep the first target in iteration order.
    """
    best_distance = config.scan_cutoff
    nearest = None
    position = snapshot.agent.position
    for target in snapshot.targets:
        distance = float(np.linalg.norm(target.position - position))
        if distance < best_distance and is_eligible(target, snapshot.agent.team):
            best_distance = distance
            nearest = target
    return nearest


def signed_yaw_angle(snapshot, position) -> float:
    """Signed yaw angle in degrees from the direction to `position` to forward."""
    to_target = horizontal(np.asarray(position, dtype=np.float64) - snapshot.agent.position)
    return signed_angle(to_target, forward_axis(snapshot.agent.yaw))


def steer_toward(snapshot, position, config=DEFAULT_NAVIGATION) -> Intent:
    """Resolve a rotate-or-move intent that heads the agent to `position`.

    The returned Intent never has the targeting effect set; callers merge
    the effect toggle themselves.
    """
    angle = signed_yaw_angle(snapshot, position)
    if angle < -config.dead_band_deg:
        return Intent(rotate=1)
    if angle > config.dead_band_deg:
        return Intent(rotate=-1)
    return Intent(move=1)


def steer_to_base(snapshot, config=DEFAULT_NAVIGATION) -> Intent:
    return steer_toward(snapshot, snapshot.base.position, config)
