"""Demo: blue plays with the navigation slots against a scripted red team."""
import argparse
import logging

import numpy as np

from cogsarena import capture_return_v0
from cogsarena._cogsarena_utils.core import Team
from cogsarena._cogsarena_utils.logging_utils import configure_logging, log_key_values
from cogsarena.capture_return import ArenaConfig, Scenario
from cogsarena.capture_return.actions import action_from_keys

logger = logging.getLogger("demo")


def navigation_policy(obs, rng):
    """Go for targets most of the time, head home sometimes, fire at random."""
    keys = {"A"} if rng.rand() < 0.8 else {"S"}
    if rng.rand() < 0.1:
        keys.add("Space")
    return action_from_keys(keys)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--steps", type=int, default=600)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    configure_logging(args.log_level)
    rng = np.random.RandomState(args.seed)

    scenario = Scenario(ArenaConfig(scripted_team=Team.RED))
    environment = capture_return_v0.env(scenario=scenario, max_steps=args.steps)
    obs, info = environment.reset(seed=args.seed)

    try:
        step = 0
        while environment.agents:
            actions = {agent: navigation_policy(obs[agent], rng) for agent in environment.agents}
            obs, rewards, terminated, truncated, info = environment.step(actions)

            if step % 100 == 0:
                log_key_values("demo", {
                    "step": step,
                    "mean_reward": float(np.mean(list(rewards.values()))),
                    **{agent: values["carried"] for agent, values in info.items()},
                }, prefix="progress")
            step += 1
    except KeyboardInterrupt:
        logger.info("interrupted by user")
    finally:
        environment.close()


if __name__ == "__main__":
    main()
