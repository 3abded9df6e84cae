"""Hand-placed worlds for unit tests."""
import numpy as np

from cogsarena._cogsarena_utils.core import Agent, HomeBase, Target, Team, World
from cogsarena._cogsarena_utils.kinematics import TankKinematics


def make_agent(name, team=Team.BLUE, pos=(0.0, 0.0, 0.0), yaw=0.0, size=0.5):
    agent = Agent(team)
    agent.name = name
    agent.size = size
    agent.state.p_pos = np.array(pos, dtype=np.float64)
    agent.state.p_orient = yaw
    agent.kinematics = TankKinematics(dt=0.1)
    return agent


def make_target(name, pos, carried_by=Team.NONE, in_base=Team.NONE, size=0.3):
    target = Target()
    target.name = name
    target.size = size
    target.state.p_pos = np.array(pos, dtype=np.float64)
    target.carried_by = Team(carried_by)
    target.in_base = Team(in_base)
    return target


def build_world(pos=(0.0, 0.0, 0.0), yaw=0.0, team=Team.BLUE, base_pos=(0.0, 0.0, 10.0),
                targets=(), others=()):
    """World with one observed agent ("me"), its base and an opposing base.

    Args:
        targets: Iterable of (pos, carried_by, in_base) tuples.
        others: Iterable of (name, team, pos, yaw) tuples for extra agents.

    Returns:
        tuple: (world, agent)
    """
    world = World()
    world.arena_half_size = 50.0
    agent = make_agent("me", team=team, pos=pos, yaw=yaw)
    world.agents.append(agent)
    for name, other_team, other_pos, other_yaw in others:
        world.agents.append(make_agent(name, team=other_team, pos=other_pos, yaw=other_yaw))

    own_base = HomeBase(team)
    own_base.name = "base_own"
    own_base.state.p_pos = np.array(base_pos, dtype=np.float64)
    enemy_base = HomeBase(Team(team).opponent)
    enemy_base.name = "base_enemy"
    enemy_base.state.p_pos = np.array([40.0, 0.0, 40.0])
    world.bases.extend([own_base, enemy_base])

    for i, (target_pos, carried_by, in_base) in enumerate(targets):
        world.targets.append(make_target(f"target_{i}", target_pos, carried_by, in_base))
    return world, agent
