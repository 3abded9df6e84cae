"""Contact, trigger and targeting-probe events for the arena.

This is the collision collaborator of the arena core. It works in two
phases each tick so that rewards see the world as it was at contact time:

1) `detect(world)` inspects overlaps and the targeting probe and returns
   RewardEvents per agent, without touching the world.
2) `resolve(world, events)` applies the consequences: wall clamping,
   target pickups, deliveries into a base, and freezing probed agents.

Collisions and triggers are reported on the tick contact begins (enter
semantics), matching physics-engine collision callbacks. The targeting
effect reports one EFFECT_USED and one EFFECT_PROBE event on every tick it
is enabled while the agent is not frozen.

Overlap tests are sphere-sphere in 3D; walls are the planes
x = ±arena_half_size and z = ±arena_half_size.
"""
import logging

import numpy as np

from cogsarena._cogsarena_utils.core import Team, is_opponent
from cogsarena._cogsarena_utils.geometry import EPSILON, forward_axis
from cogsarena.capture_return.capture_return_reward import (
    EventKind,
    agent_collision,
    base_contact,
    effect_probe,
    effect_used,
    target_contact,
    wall_collision,
)

logger = logging.getLogger(__name__)

WALL = "__wall__"


def _overlaps(a, b) -> bool:
    return float(np.linalg.norm(a.state.p_pos - b.state.p_pos)) < a.size + b.size


def touches_wall(agent, half_size) -> bool:
    x, _, z = agent.state.p_pos
    # An agent clamped onto the wall keeps touching it
    limit = half_size - agent.size - EPSILON
    return abs(x) >= limit or abs(z) >= limit


def sphere_sweep(origin, direction, radius, max_distance, candidates):
    """First candidate hit by a sphere swept from `origin` along `direction`.

    Args:
        origin: Start point of the sweep.
        direction: Unit sweep direction.
        radius: Radius of the swept sphere.
        max_distance: Sweep length.
        candidates: Entities with `state.p_pos` and `size`.

    Returns:
        The entity hit closest along the sweep, or None.
    """
    best = None
    best_along = np.inf
    for candidate in candidates:
        offset = candidate.state.p_pos - origin
        along = float(np.dot(offset, direction))
        if along < 0.0 or along > max_distance + candidate.size + radius:
            continue
        closest = origin + direction * min(along, max_distance)
        if np.linalg.norm(candidate.state.p_pos - closest) < radius + candidate.size:
            if along < best_along:
                best_along = along
                best = candidate
    return best


class ArenaContacts:
    """Stateful contact detector for one environment.

    Tracks which contacts were already touching on the previous tick, so
    that collision and trigger events fire on entry only.

    Attributes:
        probe_radius (float): Radius of the targeting sweep.
        probe_range (float): Length of the targeting sweep.
        freeze_ticks (int): Ticks an agent stays frozen after being hit.
        carry_capacity (int): Maximum targets an agent can hold.
    """

    def __init__(self, probe_radius=0.25, probe_range=20.0, freeze_ticks=30, carry_capacity=3):
        if probe_radius <= 0 or probe_range <= 0:
            raise ValueError("probe_radius and probe_range must be positive")
        self.probe_radius = probe_radius
        self.probe_range = probe_range
        self.freeze_ticks = freeze_ticks
        self.carry_capacity = carry_capacity
        self._touching = set()
        self._current = set()
        self._probe_hits = {}

    def reset(self):
        self._touching = set()
        self._current = set()
        self._probe_hits = {}

    def probe(self, agent, world):
        """Agent hit by `agent`'s targeting sweep this tick, or None."""
        others = [other for other in world.agents if other is not agent]
        return sphere_sweep(
            agent.state.p_pos,
            forward_axis(agent.state.p_orient),
            self.probe_radius,
            self.probe_range,
            others,
        )

    def detect(self, world):
        """Report this tick's events per agent name. Does not mutate the world."""
        events = {agent.name: [] for agent in world.agents}
        self._current = set()
        self._probe_hits = {}

        for agent in world.agents:
            agent_events = events[agent.name]

            if touches_wall(agent, world.arena_half_size):
                self._enter(agent.name, WALL, agent_events, wall_collision())

            for other in world.agents:
                if other is not agent and _overlaps(agent, other):
                    self._enter(agent.name, other.name, agent_events, agent_collision(other.team))

            for target in world.targets:
                if target.carrier == agent.name:
                    continue
                if _overlaps(agent, target):
                    self._enter(agent.name, target.name, agent_events, target_contact(target))

            for base in world.bases:
                if _overlaps(agent, base):
                    self._enter(agent.name, base.name, agent_events, base_contact(base.team))

            if agent.intent.effect and not agent.frozen:
                hit = self.probe(agent, world)
                agent_events.append(effect_used())
                agent_events.append(effect_probe(hit.team if hit is not None else Team.NONE))
                if hit is not None:
                    self._probe_hits[agent.name] = hit.name

        return events

    def _enter(self, name, other, agent_events, event):
        key = (name, other)
        self._current.add(key)
        if key not in self._touching:
            agent_events.append(event)

    def resolve(self, world, events):
        """Apply the world-side consequences of this tick's events."""
        half = world.arena_half_size
        for agent in world.agents:
            limit = half - agent.size
            agent.state.p_pos[0] = np.clip(agent.state.p_pos[0], -limit, limit)
            agent.state.p_pos[2] = np.clip(agent.state.p_pos[2], -limit, limit)

        for agent in world.agents:
            if agent.frozen:
                agent.state.frozen_ticks -= 1
                if agent.state.frozen_ticks <= 0:
                    agent.state.frozen = False
                    agent.state.frozen_ticks = 0

        for agent in world.agents:
            for event in events.get(agent.name, ()):
                if event.kind is EventKind.TARGET_CONTACT:
                    self._pick_up(agent, world.target_by_name(event.target_name))
                elif event.kind is EventKind.BASE_CONTACT and event.base_team == agent.team:
                    self._deliver(agent, world)

        for shooter_name, hit_name in self._probe_hits.items():
            shooter = world.agent_by_name(shooter_name)
            hit = world.agent_by_name(hit_name)
            if is_opponent(shooter.team, hit.team):
                self._freeze(hit, world)

        self._touching = self._current

    def _pick_up(self, agent, target):
        if agent.frozen or agent.carried_count >= self.carry_capacity:
            return
        if target.carried_by != Team.NONE or target.in_base == agent.team:
            return
        target.set_carried(agent)
        target.state.p_pos = agent.state.p_pos.copy()
        agent.carried.append(target.name)

    def _deliver(self, agent, world):
        if not agent.carried:
            return
        base = world.base_of(agent.team)
        for name in agent.carried:
            target = world.target_by_name(name)
            target.set_in_base(agent.team)
            target.state.p_pos = base.state.p_pos.copy()
        logger.debug("%s delivered %d target(s) at t=%d", agent.name, len(agent.carried), world.t)
        agent.carried = []

    def _freeze(self, agent, world):
        agent.state.frozen = True
        agent.state.frozen_ticks = self.freeze_ticks
        for name in agent.carried:
            target = world.target_by_name(name)
            target.set_free()
            target.state.p_pos = agent.state.p_pos.copy()
        agent.carried = []
        logger.debug("%s frozen for %d ticks at t=%d", agent.name, self.freeze_ticks, world.t)
