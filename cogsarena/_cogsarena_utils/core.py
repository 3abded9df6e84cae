"""cogsarena core data model and world container.

This module defines the building blocks every arena environment uses:
- Enumerations for teams and entity kinds (Team, EntityKind)
- State containers (EntityState, AgentState)
- World objects (Entity, Target, HomeBase, Agent) and the episode Timer
- The World container, its one-step motion update, and read-only
  per-agent snapshots (WorldSnapshot)

Key concepts:
- Coordinate frame: 3D, y-up; see `geometry` for the axis convention
- Agents carry a 5-slot discrete action selection and the Intent it
  resolved to; the kinematics model turns the Intent into motion
- Team membership and entity type are resolved once at construction as
  enum values, so per-tick checks are plain comparisons

What this module DOES NOT do:
- No collision detection or event generation (see capture_return.contacts)
- No reward computation (see capture_return.capture_return_reward)
- No observation encoding (see capture_return.observation)

Typical per-step flow (handled by environments using this World):
1) Environment sets each agent's 5-slot action selection
2) World.step():
   - Calls scripted `action_callback` if present (to fill `agent.action`)
   - Resolves actions into `agent.intent` via `intent_resolver`
   - Advances all movable agents via their `kinematics.step(...)`
3) Environment collects events, computes rewards and ticks the timer
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Tuple

import numpy as np


class Team(IntEnum):
    """Team identifiers.

    The integer value doubles as the carried-by / in-base indicator in
    observations: 0 means "no team" (not carried, not in a base).
    """

    NONE = 0
    BLUE = 1
    RED = 2

    @property
    def opponent(self):
        if self is Team.BLUE:
            return Team.RED
        if self is Team.RED:
            return Team.BLUE
        return Team.NONE


def is_opponent(team, other) -> bool:
    """True when both teams are real teams and differ."""
    return team != Team.NONE and other != Team.NONE and team != other


class EntityKind(Enum):
    """Kind of an arena entity, fixed at construction."""

    AGENT = "agent"
    TARGET = "target"
    BASE = "base"
    WALL = "wall"


@dataclass(frozen=True)
class Intent:
    """Resolved per-tick intent of one agent.

    Attributes:
        move: +1 forward, -1 backward, 0 no translation.
        rotate: +1 positive yaw (turn right), -1 negative yaw, 0 none.
        effect: Whether the targeting effect is enabled this tick.
    """

    move: int = 0
    rotate: int = 0
    effect: bool = False


class EntityState:
    """Position and velocity shared by all entities.

    Attributes:
        p_pos (np.ndarray | None): 3D position [x, y, z] in world coordinates.
            None until initialized.
        p_vel (np.ndarray): 3D linear velocity in world units per second.
    """

    def __init__(self):
        # Physical position [x, y, z] in world coordinates
        self.p_pos = None
        # Linear velocity (set by kinematics each step)
        self.p_vel = np.zeros(3)


class AgentState(EntityState):
    """Extended state for agents (adds yaw and the frozen flag).

    Attributes:
        p_orient (float | None): Yaw in degrees about +y. None until initialized.
        frozen (bool): True while the agent is disabled by an opponent's
            targeting effect.
        frozen_ticks (int): Remaining frozen ticks, owned by the contact
            collaborator that applies freezes.
    """

    def __init__(self):
        super().__init__()
        self.p_orient = None
        self.frozen = False
        self.frozen_ticks = 0


class Entity:
    """Base class for anything placed in the world.

    Attributes:
        name (str): Identifier (stable across an episode).
        kind (EntityKind): Entity type, set by subclasses.
        size (float): Collision radius in world units.
        movable (bool): If True, World.step() may change its state.
        state (EntityState): Position/velocity state.
    """

    kind = None

    def __init__(self):
        self.name = ""
        self.size = 0.5
        self.movable = False
        self.state = EntityState()


class Target(Entity):
    """Movable object that agents collect and return to their base.

    A target is always in exactly one of three conditions: free, carried,
    or resting in a base. The mutators below keep `carried_by` and
    `in_base` mutually exclusive.

    Attributes:
        carried_by (Team): Team of the carrying agent, Team.NONE if not carried.
        carrier (str | None): Name of the carrying agent.
        in_base (Team): Team owning the base it rests in, Team.NONE otherwise.
    """

    kind = EntityKind.TARGET

    def __init__(self):
        super().__init__()
        self.size = 0.3
        self.carried_by = Team.NONE
        self.carrier = None
        self.in_base = Team.NONE

    @property
    def is_free(self) -> bool:
        return self.carried_by == Team.NONE and self.in_base == Team.NONE

    def set_carried(self, agent):
        self.carried_by = Team(agent.team)
        self.carrier = agent.name
        self.in_base = Team.NONE

    def set_in_base(self, team):
        self.carried_by = Team.NONE
        self.carrier = None
        self.in_base = Team(team)

    def set_free(self):
        self.carried_by = Team.NONE
        self.carrier = None
        self.in_base = Team.NONE


class HomeBase(Entity):
    """Team base where targets are delivered. Immutable per episode."""

    kind = EntityKind.BASE

    def __init__(self, team=Team.NONE):
        super().__init__()
        self.size = 1.5
        self.team = Team(team)


class Timer:
    """Episode countdown owned by the environment.

    `remaining` never increases except through `reset()`.
    """

    def __init__(self, duration=120.0):
        if duration <= 0:
            raise ValueError(f"Timer duration must be positive, got {duration}")
        self.duration = float(duration)
        self.remaining = float(duration)

    def tick(self, dt):
        self.remaining = max(0.0, self.remaining - float(dt))
        return self.remaining

    @property
    def expired(self) -> bool:
        return self.remaining <= 0.0

    def reset(self):
        self.remaining = self.duration


class Agent(Entity):
    """Controllable arena agent.

    Attributes:
        team (Team): Team membership.
        carried (list[str]): Names of targets currently carried.
        reward (float): Accumulated reward, written only by the reward engine.
        action (np.ndarray | None): Last 5-slot discrete action selection.
        intent (Intent): Movement/rotation/effect intent resolved this tick.
        kinematics: Object with `step([x, y, z, yaw], intent, load) ->
            [x, y, z, yaw]` applying the resolved intent.
        action_callback (callable | None): If set, called each step as
            `action_callback(agent, world)` to produce an action selection.
        frozen_tracker: Previous-tick frozen flag tracker, installed by the
            reward engine at episode start.
    """

    kind = EntityKind.AGENT

    def __init__(self, team=Team.NONE):
        super().__init__()
        self.movable = True
        self.team = Team(team)
        self.state = AgentState()
        self.carried = []
        self.reward = 0.0
        self.action = None
        self.intent = Intent()
        self.kinematics = None
        self.action_callback = None
        self.frozen_tracker = None

    @property
    def carried_count(self) -> int:
        return len(self.carried)

    @property
    def frozen(self) -> bool:
        return bool(self.state.frozen)

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.state.p_vel))


def _frozen_array(values) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class AgentView:
    name: str
    team: Team
    position: np.ndarray
    velocity: np.ndarray
    yaw: float
    frozen: bool
    carried_count: int


@dataclass(frozen=True)
class BaseView:
    team: Team
    position: np.ndarray


@dataclass(frozen=True)
class TargetView:
    name: str
    position: np.ndarray
    carried_by: Team
    in_base: Team


@dataclass(frozen=True)
class WorldSnapshot:
    """Immutable per-agent view of the world for one tick.

    Arrays are read-only copies, so later motion updates never leak into
    a snapshot already handed to the encoder or the navigation heuristic.

    Attributes:
        agent (AgentView): The observing agent.
        base (BaseView): The observing agent's own base.
        time_remaining (float): Timer value at snapshot time.
        targets (tuple[TargetView, ...]): All targets in registration order.
    """

    agent: AgentView
    base: BaseView
    time_remaining: float
    targets: Tuple[TargetView, ...]


class World:
    """Container for all entities and the motion step.

    Attributes:
        agents (list[Agent]): All agents in the world.
        targets (list[Target]): All targets, in stable registration order.
        bases (list[HomeBase]): One base per team.
        timer (Timer): Episode countdown.
        arena_half_size (float): Walls sit at ±arena_half_size on x and z.
        dt (float): Simulation step in seconds.
        t (int): Current timestep counter (environments increment it).
        events (dict[str, list]): Reward events reported for the current
            tick, keyed by agent name.
        intent_resolver (callable | None): `(agent, world) -> Intent`.
    """

    def __init__(self):
        self.agents = []
        self.targets = []
        self.bases = []
        self.timer = Timer()
        self.arena_half_size = 10.0
        self.dt = 0.1
        self.t = 0
        self.events = {}
        # Callable (agent, world) -> Intent, installed by the environment
        self.intent_resolver = None

    @property
    def entities(self):
        """All entities (agents, then targets, then bases)."""
        return self.agents + self.targets + self.bases

    @property
    def policy_agents(self):
        """Agents controlled externally (no action_callback)."""
        return [agent for agent in self.agents if agent.action_callback is None]

    @property
    def scripted_agents(self):
        """Agents using a scripted policy via `action_callback`."""
        return [agent for agent in self.agents if agent.action_callback is not None]

    def agent_by_name(self, name) -> Agent:
        for agent in self.agents:
            if agent.name == name:
                return agent
        raise KeyError(name)

    def target_by_name(self, name) -> Target:
        for target in self.targets:
            if target.name == name:
                return target
        raise KeyError(name)

    def base_of(self, team) -> Optional[HomeBase]:
        """The base owned by `team`, or None."""
        for base in self.bases:
            if base.team == team:
                return base
        return None

    def snapshot(self, agent) -> WorldSnapshot:
        """Build the read-only view `agent` observes this tick.

        Raises:
            ValueError: If the agent's team owns no base.
        """
        base = self.base_of(agent.team)
        if base is None:
            raise ValueError(f"No base registered for team {Team(agent.team).name}")
        return WorldSnapshot(
            agent=AgentView(
                name=agent.name,
                team=Team(agent.team),
                position=_frozen_array(agent.state.p_pos),
                velocity=_frozen_array(agent.state.p_vel),
                yaw=float(agent.state.p_orient),
                frozen=agent.frozen,
                carried_count=agent.carried_count,
            ),
            base=BaseView(team=base.team, position=_frozen_array(base.state.p_pos)),
            time_remaining=float(self.timer.remaining),
            targets=tuple(
                TargetView(
                    name=target.name,
                    position=_frozen_array(target.state.p_pos),
                    carried_by=Team(target.carried_by),
                    in_base=Team(target.in_base),
                )
                for target in self.targets
            ),
        )

    def step(self):
        """Advance the world by one time step using kinematics.

        Order of operations:
            1) For each scripted agent, call its `action_callback(agent, world)`
               to populate `agent.action`; then, if an `intent_resolver` is
               installed, resolve every agent's action into `agent.intent`.
            2) For each movable agent with a kinematics model:
               - Build current kinematic state [x, y, z, yaw]
               - Call `kinematics.step(state, intent, load=carried_count)`;
                 frozen agents step with a null intent
               - Write pose back and derive velocity from the displacement
            3) Carried targets follow their carrier.

        Notes:
            - No collision handling or events are produced here.
            - `world.t` is NOT incremented here; environments do that.
        """
        for agent in self.scripted_agents:
            agent.action = agent.action_callback(agent, self)

        if self.intent_resolver is not None:
            for agent in self.agents:
                if agent.action is not None:
                    agent.intent = self.intent_resolver(agent, self)

        for agent in self.agents:
            if agent.movable and agent.kinematics is not None:
                kin_state = np.array(
                    [*agent.state.p_pos, agent.state.p_orient], dtype=np.float64
                )
                intent = agent.intent
                if agent.frozen:
                    intent = Intent(effect=intent.effect)
                new_kin_state = agent.kinematics.step(
                    kin_state, intent, load=agent.carried_count
                )
                agent.state.p_vel = (new_kin_state[:3] - kin_state[:3]) / agent.kinematics.dt
                agent.state.p_pos = new_kin_state[:3].copy()
                agent.state.p_orient = float(new_kin_state[3])

        for target in self.targets:
            if target.carrier is not None:
                carrier = self.agent_by_name(target.carrier)
                target.state.p_pos = carrier.state.p_pos.copy()
