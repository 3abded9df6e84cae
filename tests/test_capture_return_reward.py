"""Unit tests for the capture-and-return reward engine.

Covers each event rule, the frozen-state edge detector, the optional
speed incentive, and the pure shape_reward step.
"""

import unittest

import numpy as np

from cogsarena._cogsarena_utils.core import Team
from cogsarena.capture_return.capture_return_reward import (
    CaptureReturnReward,
    FrozenStateTracker,
    RewardWeights,
    agent_collision,
    base_contact,
    effect_probe,
    effect_used,
    shape_reward,
    speed_incentive_reward,
    target_contact,
    wall_collision,
)

from builders import build_world, make_target


class TestFrozenStateTracker(unittest.TestCase):

    def test_fires_only_on_rising_edge(self):
        tracker = FrozenStateTracker()
        fired = []
        for current in [False, True, True, False, False, True]:
            fired.append(tracker.entered(current))
            tracker.update(current)
        self.assertEqual(fired, [False, True, False, False, False, True])

    def test_initial_state(self):
        tracker = FrozenStateTracker(initial=True)
        self.assertFalse(tracker.entered(True))
        tracker.reset()
        self.assertTrue(tracker.entered(True))


class TestCaptureReturnReward(unittest.TestCase):
    """Scenario tests through compute_reward on a hand-built world."""

    def setUp(self):
        self.world, self.agent = build_world(team=Team.BLUE)
        self.reward = CaptureReturnReward()
        self.reward.reset_agent(self.agent)

    def _tick(self, *events):
        self.world.events = {self.agent.name: list(events)}
        return self.reward.compute_reward(self.agent, self.world)

    def test_pickup_free_target(self):
        target = make_target("t", (0.0, 0.0, 0.0))
        delta = self._tick(target_contact(target))
        self.assertEqual(delta, 0.2)
        self.assertEqual(self.agent.reward, 0.2)

    def test_pickup_from_enemy_base(self):
        target = make_target("t", (0.0, 0.0, 0.0), in_base=Team.RED)
        self.assertEqual(self._tick(target_contact(target)), 0.2)

    def test_no_pickup_reward_for_own_base_or_carried(self):
        in_own_base = make_target("a", (0.0, 0.0, 0.0), in_base=Team.BLUE)
        carried = make_target("b", (0.0, 0.0, 0.0), carried_by=Team.RED)
        self.assertEqual(self._tick(target_contact(in_own_base), target_contact(carried)), 0.0)

    def test_no_pickup_reward_while_frozen(self):
        self.agent.state.frozen = True
        self.agent.frozen_tracker.update(True)  # already frozen last tick
        target = make_target("t", (0.0, 0.0, 0.0))
        self.assertEqual(self._tick(target_contact(target)), 0.0)

    def test_delivery_scales_with_carried_count(self):
        self.agent.carried = ["target_0", "target_1"]
        delta = self._tick(base_contact(Team.BLUE))
        self.assertAlmostEqual(delta, 2.8, places=12)

    def test_delivery_without_cargo(self):
        self.assertAlmostEqual(self._tick(base_contact(Team.BLUE)), 0.8, places=12)

    def test_enemy_base_contact_gives_nothing(self):
        self.agent.carried = ["target_0"]
        self.assertEqual(self._tick(base_contact(Team.RED)), 0.0)

    def test_frozen_transition_penalised_once(self):
        self.agent.state.frozen = True
        self.assertEqual(self._tick(), -0.5)
        self.assertEqual(self._tick(), 0.0)
        self.agent.state.frozen = False
        self.assertEqual(self._tick(), 0.0)
        self.agent.state.frozen = True
        self.assertEqual(self._tick(), -0.5)
        self.assertEqual(self.agent.reward, -1.0)

    def test_effect_hit_opponent(self):
        delta = self._tick(effect_used(), effect_probe(Team.RED))
        self.assertAlmostEqual(delta, -0.02 + 0.5, places=12)

    def test_effect_miss(self):
        delta = self._tick(effect_used(), effect_probe(Team.NONE))
        self.assertAlmostEqual(delta, -0.02 - 0.05, places=12)

    def test_effect_hitting_teammate_counts_as_miss(self):
        delta = self._tick(effect_used(), effect_probe(Team.BLUE))
        self.assertAlmostEqual(delta, -0.07, places=12)

    def test_wall_collision(self):
        self.assertEqual(self._tick(wall_collision()), -0.75)

    def test_agent_collisions(self):
        self.assertEqual(self._tick(agent_collision(Team.RED)), -0.2)
        self.assertEqual(self._tick(agent_collision(Team.BLUE)), 0.0)

    def test_all_rules_add_up(self):
        self.agent.state.frozen = True
        self.agent.carried = ["target_0"]
        delta = self._tick(
            wall_collision(),
            agent_collision(Team.RED),
            base_contact(Team.BLUE),
            effect_used(),
            effect_probe(Team.RED),
        )
        self.assertAlmostEqual(delta, -0.5 - 0.75 - 0.2 + 1.8 - 0.02 + 0.5, places=12)

    def test_accumulates_across_ticks(self):
        self._tick(wall_collision())
        self._tick(wall_collision())
        self.assertAlmostEqual(self.agent.reward, -1.5, places=12)

    def test_reset_agent(self):
        self._tick(wall_collision())
        self.agent.state.frozen = True
        self.reward.reset_agent(self.agent)
        self.assertEqual(self.agent.reward, 0.0)
        # Seeded from the current flag: already frozen is not a new transition
        self.assertEqual(self._tick(), 0.0)

    def test_missing_events_mean_no_reward(self):
        self.world.events = {}
        self.assertEqual(self.reward.compute_reward(self.agent, self.world), 0.0)

    def test_custom_weights(self):
        reward = CaptureReturnReward(RewardWeights(wall_collision=-2.0))
        self.world.events = {self.agent.name: [wall_collision()]}
        self.assertEqual(reward.compute_reward(self.agent, self.world), -2.0)


class TestSpeedIncentive(unittest.TestCase):

    def setUp(self):
        self.weights = RewardWeights(speed_incentive=True)

    def test_at_optimal_speed(self):
        self.assertAlmostEqual(speed_incentive_reward(1.5, 0, self.weights), 0.0, places=12)

    def test_slightly_below_optimal_rewarded(self):
        # efficiency 0.9 -> 0.01 * 0.1
        self.assertAlmostEqual(speed_incentive_reward(1.35, 0, self.weights), 0.001, places=12)

    def test_too_slow_penalised(self):
        # efficiency 0.4 -> -0.02 * 0.6
        self.assertAlmostEqual(speed_incentive_reward(0.6, 0, self.weights), -0.012, places=12)

    def test_carrying_lowers_optimum_and_costs(self):
        # optimal 1.4 with two targets, efficiency 1 -> 0 - 0.02 * 2
        self.assertAlmostEqual(speed_incentive_reward(1.4, 2, self.weights), -0.04, places=12)

    def test_disabled_by_default(self):
        world, agent = build_world()
        agent.state.p_vel = np.array([0.0, 0.0, 0.1])
        reward = CaptureReturnReward()
        reward.reset_agent(agent)
        world.events = {}
        self.assertEqual(reward.compute_reward(agent, world), 0.0)

    def test_enabled_in_engine(self):
        world, agent = build_world()
        agent.state.p_vel = np.array([0.0, 0.0, 0.6])
        reward = CaptureReturnReward(self.weights)
        reward.reset_agent(agent)
        world.events = {}
        self.assertAlmostEqual(reward.compute_reward(agent, world), -0.012, places=12)


class TestShapeReward(unittest.TestCase):

    def _shape(self, events):
        return shape_reward(
            1.25, events,
            agent_team=Team.BLUE, entered_frozen=False, frozen=False,
            carried_count=2, speed=0.0,
        )

    def test_order_independent(self):
        target = make_target("t", (0.0, 0.0, 0.0))
        events = [
            wall_collision(),
            effect_probe(Team.RED),
            base_contact(Team.BLUE),
            target_contact(target),
            effect_used(),
            agent_collision(Team.RED),
        ]
        forward = self._shape(events)
        backward = self._shape(list(reversed(events)))
        self.assertEqual(forward, backward)

    def test_returns_new_total_and_delta(self):
        total, delta = self._shape([wall_collision()])
        self.assertEqual(delta, -0.75)
        self.assertEqual(total, 0.5)


if __name__ == '__main__':
    unittest.main()
