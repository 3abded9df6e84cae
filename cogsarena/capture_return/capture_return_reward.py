"""Reward shaping for the capture-and-return arena.

Rewards are event driven. Each tick the contact collaborator reports a
list of RewardEvents per agent; the engine turns them into a reward delta
and adds it to the agent's accumulated reward. All rules are additive and
may fire in the same tick:

    Event                                          Delta (default)
    ---------------------------------------------  ----------------------
    Agent enters the frozen state                  frozen_penalty   -0.5
    Targeting effect used this tick                effect_use       -0.02
    Targeting probe hit an opposing agent          effect_hit       +0.5
    Targeting probe missed                         effect_miss      -0.05
    Contact with a free target not in own base,
      while not frozen                             pickup           +0.2
    Contact with own base                          0.8 + 1.0 * carried
    Collision with an arena wall                   wall_collision   -0.75
    Collision with an opposing agent               opponent_collision -0.2

The frozen transition is not reported by the collaborator: the engine
derives it from the agent's FrozenStateTracker, which stores the previous
tick's frozen flag and is updated after the reward is computed.

Optional speed incentive (off by default):
    optimal = optimal_speed_base - optimal_speed_carry_drop * carried
    efficiency = speed / optimal
    r = speed_reward_multiplier * (1 - efficiency)        if efficiency >= optimal_speed_ratio
    r = carrying_penalty_multiplier * (1 - efficiency)    otherwise
    r += carrying_penalty_multiplier * carried
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cogsarena._cogsarena_utils.core import Team, is_opponent
from cogsarena._cogsarena_utils.reward import BaseReward

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Kinds of tick-scoped events reported by the contact collaborator.

    Declaration order is the canonical summation order.
    """

    EFFECT_USED = 1
    EFFECT_PROBE = 2
    TARGET_CONTACT = 3
    BASE_CONTACT = 4
    WALL_COLLISION = 5
    AGENT_COLLISION = 6


@dataclass(frozen=True)
class RewardEvent:
    """One event for one agent in one tick. Never retained across ticks.

    Payload fields are only meaningful for the kinds that use them:
        hit_team: EFFECT_PROBE, team of the agent hit (Team.NONE on a miss)
        target_carried_by, target_in_base: TARGET_CONTACT, target state at contact
        target_name: TARGET_CONTACT, which target was touched
        base_team: BASE_CONTACT, owner of the base touched
        other_team: AGENT_COLLISION, team of the other agent
    """

    kind: EventKind
    hit_team: Team = Team.NONE
    target_carried_by: Team = Team.NONE
    target_in_base: Team = Team.NONE
    target_name: Optional[str] = None
    base_team: Team = Team.NONE
    other_team: Team = Team.NONE


def effect_used():
    return RewardEvent(EventKind.EFFECT_USED)


def effect_probe(hit_team=Team.NONE):
    return RewardEvent(EventKind.EFFECT_PROBE, hit_team=Team(hit_team))


def target_contact(target):
    return RewardEvent(
        EventKind.TARGET_CONTACT,
        target_carried_by=Team(target.carried_by),
        target_in_base=Team(target.in_base),
        target_name=target.name,
    )


def base_contact(team):
    return RewardEvent(EventKind.BASE_CONTACT, base_team=Team(team))


def wall_collision():
    return RewardEvent(EventKind.WALL_COLLISION)


def agent_collision(other_team):
    return RewardEvent(EventKind.AGENT_COLLISION, other_team=Team(other_team))


@dataclass(frozen=True)
class RewardWeights:
    """Named reward constants, one instance per arena configuration."""

    frozen_penalty: float = -0.5
    effect_use: float = -0.02
    effect_hit: float = 0.5
    effect_miss: float = -0.05
    pickup: float = 0.2
    delivery_base: float = 0.8
    delivery_per_carried: float = 1.0
    wall_collision: float = -0.75
    opponent_collision: float = -0.2

    speed_incentive: bool = False
    optimal_speed_base: float = 1.5
    optimal_speed_carry_drop: float = 0.05
    optimal_speed_ratio: float = 0.8
    speed_reward_multiplier: float = 0.01
    carrying_penalty_multiplier: float = -0.02

    def __post_init__(self):
        if self.optimal_speed_base <= 0:
            raise ValueError(f"optimal_speed_base must be positive, got {self.optimal_speed_base}")


DEFAULT_WEIGHTS = RewardWeights()


class FrozenStateTracker:
    """Edge detector over the frozen flag.

    Holds exactly one boolean: the frozen flag seen on the previous tick.
    """

    def __init__(self, initial=False):
        self.previous = bool(initial)

    def entered(self, current) -> bool:
        """True only on a not-frozen -> frozen transition."""
        return not self.previous and bool(current)

    def update(self, current):
        self.previous = bool(current)

    def reset(self, current=False):
        self.previous = bool(current)


def event_reward(event, *, agent_team, frozen, carried_count, weights=DEFAULT_WEIGHTS) -> float:
    """Reward delta contributed by a single event."""
    kind = event.kind
    if kind is EventKind.EFFECT_USED:
        return weights.effect_use
    if kind is EventKind.EFFECT_PROBE:
        if is_opponent(agent_team, event.hit_team):
            return weights.effect_hit
        return weights.effect_miss
    if kind is EventKind.TARGET_CONTACT:
        if (event.target_carried_by == Team.NONE
                and event.target_in_base != agent_team
                and not frozen):
            return weights.pickup
        return 0.0
    if kind is EventKind.BASE_CONTACT:
        if event.base_team == agent_team:
            return weights.delivery_base + weights.delivery_per_carried * carried_count
        return 0.0
    if kind is EventKind.WALL_COLLISION:
        return weights.wall_collision
    if kind is EventKind.AGENT_COLLISION:
        if is_opponent(agent_team, event.other_team):
            return weights.opponent_collision
        return 0.0
    raise ValueError(f"Unknown event kind: {kind!r}")


def speed_incentive_reward(speed, carried_count, weights=DEFAULT_WEIGHTS) -> float:
    optimal_speed = weights.optimal_speed_base - weights.optimal_speed_carry_drop * carried_count
    efficiency = speed / optimal_speed
    if efficiency >= weights.optimal_speed_ratio:
        reward = weights.speed_reward_multiplier * (1 - efficiency)
    else:
        reward = weights.carrying_penalty_multiplier * (1 - efficiency)
    return reward + weights.carrying_penalty_multiplier * carried_count


def shape_reward(accumulated, events, *, agent_team, entered_frozen, frozen,
                 carried_count, speed, weights=DEFAULT_WEIGHTS):
    """Pure reward step: previous accumulated reward + this tick's signals.

    Event deltas are summed in canonical EventKind order, so the result
    does not depend on the order events were reported in.

    Args:
        accumulated: Accumulated reward before this tick.
        events: Iterable of RewardEvent for this agent and tick.
        agent_team: Team of the agent being rewarded.
        entered_frozen: Whether the agent entered the frozen state this tick.
        frozen: Current frozen flag.
        carried_count: Targets carried at event time.
        speed: Current speed magnitude.
        weights: RewardWeights to apply.

    Returns:
        tuple: (new_accumulated, delta)
    """
    ordered = sorted(events, key=lambda event: event.kind.value)
    delta = 0.0
    if entered_frozen:
        delta += weights.frozen_penalty
    for event in ordered:
        delta += event_reward(
            event,
            agent_team=agent_team,
            frozen=frozen,
            carried_count=carried_count,
            weights=weights,
        )
    if weights.speed_incentive:
        delta += speed_incentive_reward(speed, carried_count, weights)
    return accumulated + delta, delta


class CaptureReturnReward(BaseReward):
    """Per-agent reward engine for the capture-and-return arena.

    Reads the tick's events from `world.events[agent.name]` and owns no
    cross-agent state: each agent carries its own accumulated reward and
    FrozenStateTracker.

    Attributes:
        weights (RewardWeights): Reward constants.
    """

    def __init__(self, weights=None):
        self.weights = weights if weights is not None else DEFAULT_WEIGHTS

    def reset_agent(self, agent):
        """Zero the accumulated reward and seed the tracker from the current flag."""
        agent.reward = 0.0
        if agent.frozen_tracker is None:
            agent.frozen_tracker = FrozenStateTracker(agent.frozen)
        else:
            agent.frozen_tracker.reset(agent.frozen)

    def compute_reward(self, agent, world) -> float:
        """Apply this tick's events to `agent.reward` and return the delta."""
        if agent.frozen_tracker is None:
            agent.frozen_tracker = FrozenStateTracker()
        tracker = agent.frozen_tracker
        frozen = agent.frozen
        entered_frozen = tracker.entered(frozen)

        agent.reward, delta = shape_reward(
            agent.reward,
            world.events.get(agent.name, ()),
            agent_team=agent.team,
            entered_frozen=entered_frozen,
            frozen=frozen,
            carried_count=agent.carried_count,
            speed=agent.speed,
            weights=self.weights,
        )
        tracker.update(frozen)

        if entered_frozen:
            logger.debug("%s entered frozen state at t=%d", agent.name, world.t)
        return delta
