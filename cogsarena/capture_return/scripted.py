"""Scripted capture-and-return behaviour.

`CaptureAndReturn` is an `action_callback(agent, world)` that drives an
agent entirely through the navigation slots of its action selection:

- while it has spare capacity and an eligible target exists, go to the
  nearest eligible target;
- otherwise go back to base;
- enable the targeting effect whenever an opponent sits inside the probe
  cone in front of it.
"""
import numpy as np

from cogsarena._cogsarena_utils.core import is_opponent
from cogsarena._cogsarena_utils.geometry import forward_axis
from cogsarena.capture_return.actions import BASE_SLOT, EFFECT_SLOT, N_SLOTS, TARGET_SLOT
from cogsarena.capture_return.contacts import sphere_sweep
from cogsarena.capture_return.navigation import DEFAULT_NAVIGATION, find_nearest_eligible_target


class CaptureAndReturn:
    """Callable scripted policy.

    Attributes:
        carry_capacity (int): Head home once this many targets are carried.
        probe_radius (float): Radius used to decide whether to fire.
        probe_range (float): Range used to decide whether to fire.
        nav_config (NavigationConfig): Settings for the target search.
    """

    def __init__(self, carry_capacity=3, probe_radius=0.25, probe_range=20.0,
                 nav_config=DEFAULT_NAVIGATION):
        self.carry_capacity = carry_capacity
        self.probe_radius = probe_radius
        self.probe_range = probe_range
        self.nav_config = nav_config

    def __call__(self, agent, world) -> np.ndarray:
        action = np.zeros(N_SLOTS, dtype=np.int64)
        snapshot = world.snapshot(agent)

        target = None
        if agent.carried_count < self.carry_capacity:
            target = find_nearest_eligible_target(snapshot, self.nav_config)
        if target is not None:
            action[TARGET_SLOT] = 1
        else:
            action[BASE_SLOT] = 1

        if self._opponent_ahead(agent, world):
            action[EFFECT_SLOT] = 1
        return action

    def _opponent_ahead(self, agent, world) -> bool:
        others = [other for other in world.agents if other is not agent]
        hit = sphere_sweep(
            agent.state.p_pos,
            forward_axis(agent.state.p_orient),
            self.probe_radius,
            self.probe_range,
            others,
        )
        return hit is not None and is_opponent(agent.team, hit.team) and not hit.frozen
