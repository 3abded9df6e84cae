"""Capture Return v0 - team capture-and-return arena.

This module implements a PettingZoo ParallelEnv where two teams of agents
roam a walled arena, collect targets, ferry them to their own base, and
may freeze opponents with a forward targeting effect.

Key Features:
    - Discrete 5-slot actions: move, rotate, effect, go-to-target, go-to-base
    - Fixed-length observations: 9 + 6 * n_targets (see observation.py)
    - Event-driven shaped rewards (see capture_return_reward.py)
    - Optional scripted opponents (see scripted.py)
    - PettingZoo ParallelEnv API: Compatible with standard MARL libraries

Per-step order:
    1) Store each agent's action selection
    2) World.step(): scripted actions, intent resolution, kinematics
    3) Contacts.detect(): per-agent RewardEvents for this tick
    4) Scenario.reward(): apply events, frozen edge, update accumulated reward
    5) Contacts.resolve(): pickups, deliveries, freezes, wall clamping
    6) Timer tick; truncate when time runs out or max_steps is reached

Example:
    >>> from cogsarena import capture_return_v0
    >>> env = capture_return_v0.env()
    >>> obs, info = env.reset(seed=42)
    >>> actions = {agent: env.action_space(agent).sample() for agent in env.agents}
    >>> obs, rewards, terminated, truncated, info = env.step(actions)
"""
import logging
from dataclasses import dataclass

import numpy as np
from pettingzoo.utils.env import ParallelEnv
from gymnasium.utils import EzPickle

from cogsarena._cogsarena_utils.core import Agent, HomeBase, Intent, Target, Team, Timer, World
from cogsarena._cogsarena_utils.kinematics import TankKinematics
from cogsarena._cogsarena_utils.logging_utils import log_key_values
from cogsarena._cogsarena_utils.scenario import BaseScenario

from .actions import ActionDecoder, action_space
from .capture_return_reward import CaptureReturnReward
from .contacts import ArenaContacts
from .navigation import DEFAULT_NAVIGATION
from .observation import ObservationEncoder
from .scripted import CaptureAndReturn

logger = logging.getLogger(__name__)

TEAMS = (Team.BLUE, Team.RED)


@dataclass(frozen=True)
class ArenaConfig:
    """Arena layout and collaborator settings.

    Attributes:
        n_agents_per_team: Agents on each team.
        n_targets: Targets in the arena; fixes the observation length.
        arena_half_size: Walls sit at ±arena_half_size on x and z.
        agent_radius, target_radius, base_radius: Contact radii.
        episode_time: Timer duration in seconds.
        dt: Seconds per tick.
        move_speed: Unloaded speed (units/s).
        turn_speed: Yaw rate (degrees/s).
        carry_slowdown: Fractional speed loss per carried target.
        freeze_ticks: Ticks a probed agent stays frozen.
        probe_radius, probe_range: Targeting sweep geometry.
        carry_capacity: Maximum targets an agent can hold.
        scripted_team: Team driven by the scripted policy (Team.NONE for none).
    """

    n_agents_per_team: int = 2
    n_targets: int = 6
    arena_half_size: float = 10.0
    agent_radius: float = 0.5
    target_radius: float = 0.3
    base_radius: float = 1.5
    episode_time: float = 120.0
    dt: float = 0.1
    move_speed: float = 1.5
    turn_speed: float = 180.0
    carry_slowdown: float = 0.05
    freeze_ticks: int = 30
    probe_radius: float = 0.25
    probe_range: float = 20.0
    carry_capacity: int = 3
    scripted_team: Team = Team.NONE

    def __post_init__(self):
        if self.n_agents_per_team < 1:
            raise ValueError(f"n_agents_per_team must be >= 1, got {self.n_agents_per_team}")
        if self.n_targets < 0:
            raise ValueError(f"n_targets must be >= 0, got {self.n_targets}")
        if self.arena_half_size <= self.base_radius + 1.0:
            raise ValueError("arena_half_size too small to fit the bases")
        if self.scripted_team not in (Team.NONE, *TEAMS):
            raise ValueError(f"Unknown scripted_team {self.scripted_team!r}")


def make_env(raw_env):
    """Factory that instantiates the environment with given kwargs."""
    def env_fn(**kwargs):
        return raw_env(**kwargs)
    return env_fn


class raw_env(ParallelEnv, EzPickle):
    """Raw PettingZoo ParallelEnv for the capture-and-return arena.

    Observation Space (per agent):
        Box with shape (9 + 6 * n_targets,)

    Action Space (per agent):
        MultiDiscrete([3, 3, 2, 2, 2])

    Rewards returned by `step` are this tick's deltas; each agent's
    accumulated reward is reported in `infos[agent]["accumulated_reward"]`.

    Attributes:
        scenario (Scenario): World creation, reset, observation and reward
        world (World): Agents, targets, bases, timer and motion step
        max_steps (int): Episode truncation limit

    Args:
        scenario: Scenario object. If None, uses Scenario() with defaults.
        max_steps: Maximum steps before truncation (default 1200)
    """

    metadata = {
        "name": "capture_return_v0",
        "render_modes": [],
    }

    def __init__(self, scenario=None, max_steps=1200):
        EzPickle.__init__(self, scenario=scenario, max_steps=max_steps)
        super().__init__()

        self.scenario = scenario if scenario is not None else Scenario()
        self.world = self.scenario.make_world()
        self.max_steps = max_steps

        # Scripted agents act through their callback and are not exposed
        self.possible_agents = [agent.name for agent in self.world.policy_agents]
        self.agents = []

        self._action_space_template = action_space()
        self._observation_space_template = self.scenario.encoder.observation_space()
        self.action_spaces = {}
        self.observation_spaces = {}

        self._rng = np.random.RandomState()
        self.t = 0

    def reset(self, seed=None, options=None):
        """Reset the environment to its initial state.

        Args:
            seed: Random seed for reproducibility
            options: Additional options (unused, for PettingZoo compatibility)

        Returns:
            tuple: (observations, infos)
        """
        if seed is not None:
            self._rng.seed(seed)

        self.agents = self.possible_agents[:]
        self.action_spaces = {a: self._action_space_template for a in self.agents}
        self.observation_spaces = {a: self._observation_space_template for a in self.agents}

        self.scenario.reset_world(self.world, self._rng)
        self.t = 0
        logger.debug("reset seed=%s agents=%s", seed, self.agents)

        obs = self._get_obs()
        info = {a: {} for a in self.agents}
        return obs, info

    def step(self, actions):
        """Advance the environment by one tick.

        Args:
            actions: Dict mapping agent_name -> 5-slot action selection

        Returns:
            tuple: (observations, rewards, terminated, truncated, infos)
        """
        for agent_obj in self.world.policy_agents:
            if agent_obj.name in actions:
                agent_obj.action = np.asarray(actions[agent_obj.name])
            else:
                agent_obj.action = None
                agent_obj.intent = Intent()

        self.world.step()

        self.t += 1
        self.world.t = self.t

        self.world.events = self.scenario.contacts.detect(self.world)
        rewards = {}
        for agent_obj in self.world.agents:
            delta = self.scenario.reward(agent_obj, self.world)
            if agent_obj.name in self.agents:
                rewards[agent_obj.name] = delta
        self.scenario.contacts.resolve(self.world, self.world.events)

        self.world.timer.tick(self.world.dt)

        done = self.t >= self.max_steps or self.world.timer.expired
        terminated = {a: False for a in self.agents}
        truncated = {a: done for a in self.agents}

        obs = self._get_obs()
        info = {a: self._info(self.world.agent_by_name(a)) for a in self.agents}

        if done:
            self._log_episode_end()
            self.agents = []

        return obs, rewards, terminated, truncated, info

    def _info(self, agent_obj):
        return {
            "accumulated_reward": agent_obj.reward,
            "carried": agent_obj.carried_count,
            "frozen": agent_obj.frozen,
            "events": [event.kind.name for event in self.world.events.get(agent_obj.name, ())],
        }

    def _log_episode_end(self):
        delivered = {
            team.name.lower(): sum(1 for target in self.world.targets if target.in_base == team)
            for team in TEAMS
        }
        log_key_values(
            __name__,
            {
                "t": self.t,
                **{f"delivered_{team}": count for team, count in delivered.items()},
                **{agent.name: agent.reward for agent in self.world.agents},
            },
            prefix="episode_end",
        )

    def _get_obs(self):
        obs = {}
        for agent_obj in self.world.agents:
            if agent_obj.name in self.agents:
                obs[agent_obj.name] = self.scenario.observation(agent_obj, self.world)
        return obs

    def render(self):
        return None

    def close(self):
        pass

    def observation_space(self, agent):
        return self.observation_spaces[agent]

    def action_space(self, agent):
        return self.action_spaces[agent]


env = make_env(raw_env)
parallel_env = raw_env


class Scenario(BaseScenario):
    """Scenario for the capture-and-return arena.

    Owns the per-configuration collaborators: observation encoder, action
    decoder, reward engine and contact detector.

    Attributes:
        config (ArenaConfig): Arena layout and collaborator settings
        encoder (ObservationEncoder): Snapshot -> observation
        decoder (ActionDecoder): Action selection -> Intent
        reward_computer (CaptureReturnReward): Events -> reward delta
        contacts (ArenaContacts): Overlaps and probe -> events
    """

    def __init__(self, config=None, reward_weights=None, nav_config=None, precedence="base"):
        """Initialize scenario.

        Args:
            config: ArenaConfig; defaults to ArenaConfig().
            reward_weights: RewardWeights; defaults to the standard weights.
            nav_config: NavigationConfig for the go-to-target/go-to-base slots.
            precedence: Which navigation slot wins when both are set.
        """
        self.config = config if config is not None else ArenaConfig()
        self.nav_config = nav_config if nav_config is not None else DEFAULT_NAVIGATION
        self.encoder = ObservationEncoder(self.config.n_targets)
        self.decoder = ActionDecoder(self.nav_config, precedence=precedence)
        self.reward_computer = CaptureReturnReward(reward_weights)
        self.contacts = ArenaContacts(
            probe_radius=self.config.probe_radius,
            probe_range=self.config.probe_range,
            freeze_ticks=self.config.freeze_ticks,
            carry_capacity=self.config.carry_capacity,
        )

    def make_world(self):
        """Create world with two teams, their bases and the targets.

        Agents are named `<team>_<i>` (e.g. blue_0, red_1), targets
        `target_<i>`, bases `base_<team>`.

        Returns:
            World: Populated world ready for reset
        """
        config = self.config
        world = World()
        world.arena_half_size = config.arena_half_size
        world.dt = config.dt
        world.timer = Timer(config.episode_time)
        world.intent_resolver = self.resolve_intent

        kinematics = TankKinematics(
            dt=config.dt,
            move_speed=config.move_speed,
            turn_speed=config.turn_speed,
            carry_slowdown=config.carry_slowdown,
        )

        for team in TEAMS:
            for i in range(config.n_agents_per_team):
                agent = Agent(team)
                agent.name = f"{team.name.lower()}_{i}"
                agent.size = config.agent_radius
                agent.kinematics = kinematics
                if team == config.scripted_team:
                    agent.action_callback = CaptureAndReturn(
                        carry_capacity=config.carry_capacity,
                        probe_radius=config.probe_radius,
                        probe_range=config.probe_range,
                        nav_config=self.nav_config,
                    )
                world.agents.append(agent)

            base = HomeBase(team)
            base.name = f"base_{team.name.lower()}"
            base.size = config.base_radius
            world.bases.append(base)

        for i in range(config.n_targets):
            target = Target()
            target.name = f"target_{i}"
            target.size = config.target_radius
            world.targets.append(target)

        return world

    def reset_world(self, world, np_random):
        """Initialize positions and per-episode state.

        Bases sit on the x axis near opposite walls; each team spawns
        around its base facing the arena centre; targets are scattered
        uniformly over the middle third of the arena.

        Args:
            world: World object to initialize
            np_random: Random number generator (from env._rng)
        """
        half = world.arena_half_size
        base_x = half - self.config.base_radius - 1.0

        for base in world.bases:
            sign = -1.0 if base.team == Team.BLUE else 1.0
            base.state.p_pos = np.array([sign * base_x, 0.0, 0.0])

        # Spawn clear of the base so nobody starts inside a trigger
        clearance = self.config.base_radius + self.config.agent_radius + 0.5
        for agent in world.agents:
            sign = -1.0 if agent.team == Team.BLUE else 1.0
            x = sign * base_x + np_random.uniform(-1.0, 1.0)
            z = np_random.choice([-1.0, 1.0]) * np_random.uniform(clearance, max(clearance, half / 2))
            agent.state.p_pos = np.array([x, 0.0, z])
            agent.state.p_vel = np.zeros(3)
            # Face the centre: +x is yaw 90, -x is yaw 270
            agent.state.p_orient = 90.0 if agent.team == Team.BLUE else 270.0
            agent.state.frozen = False
            agent.state.frozen_ticks = 0
            agent.carried = []
            agent.action = None
            agent.intent = Intent()
            self.reward_computer.reset_agent(agent)

        spread = half / 3
        for target in world.targets:
            target.set_free()
            target.state.p_pos = np.array([
                np_random.uniform(-spread, spread),
                0.0,
                np_random.uniform(-half + 1.0, half - 1.0),
            ])

        world.timer.reset()
        world.t = 0
        world.events = {}
        self.reward_computer.reset()
        self.contacts.reset()

    def resolve_intent(self, agent, world):
        return self.decoder.decode(agent.action, world.snapshot(agent))

    def reward(self, agent, world):
        return self.reward_computer.compute_reward(agent, world)

    def observation(self, agent, world):
        return self.encoder.encode(world.snapshot(agent))
