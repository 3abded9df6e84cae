"""Tests for action decoding and intent resolution."""
import numpy as np
import pytest

from cogsarena._cogsarena_utils.core import Intent, Team
from cogsarena.capture_return.actions import ActionDecoder, action_from_keys, action_space

from builders import build_world


def _world_target_right_base_ahead():
    """Agent facing +z, free target to its right, base dead ahead."""
    return build_world(base_pos=(0.0, 0.0, 10.0),
                       targets=[((5.0, 0.0, 0.0), Team.NONE, Team.NONE)])


class TestManualSlots:

    @pytest.mark.parametrize("action, expected", [
        ([0, 0, 0, 0, 0], Intent()),
        ([1, 0, 0, 0, 0], Intent(move=1)),
        ([2, 0, 0, 0, 0], Intent(move=-1)),
        ([0, 1, 0, 0, 0], Intent(rotate=1)),
        ([0, 2, 0, 0, 0], Intent(rotate=-1)),
        ([0, 0, 1, 0, 0], Intent(effect=True)),
        ([1, 2, 1, 0, 0], Intent(move=1, rotate=-1, effect=True)),
    ])
    def test_mapping(self, action, expected):
        world, agent = build_world()
        assert ActionDecoder().decode(action, world.snapshot(agent)) == expected

    def test_unrecognised_values_are_noops(self):
        world, agent = build_world()
        intent = ActionDecoder().decode([7, -1, 2, 5, 3], world.snapshot(agent))
        assert intent == Intent()

    def test_numpy_action(self):
        world, agent = build_world()
        action = np.array([1, 1, 0, 0, 0], dtype=np.int64)
        assert ActionDecoder().decode(action, world.snapshot(agent)) == Intent(move=1, rotate=1)

    @pytest.mark.parametrize("action", [[0, 0, 0, 0], [0, 0, 0, 0, 0, 0], []])
    def test_wrong_length_raises(self, action):
        world, agent = build_world()
        with pytest.raises(ValueError):
            ActionDecoder().decode(action, world.snapshot(agent))


class TestNavigationSlots:

    def test_go_to_target_overrides_manual(self):
        world, agent = _world_target_right_base_ahead()
        intent = ActionDecoder().decode([2, 2, 1, 1, 0], world.snapshot(agent))
        assert intent == Intent(move=0, rotate=1, effect=True)

    def test_go_to_target_without_eligible_target_is_noop(self):
        world, agent = build_world(targets=[((5.0, 0.0, 0.0), Team.RED, Team.NONE)])
        decoder = ActionDecoder()
        snapshot = world.snapshot(agent)
        assert decoder.decode([1, 2, 0, 1, 0], snapshot) == decoder.manual_intent([1, 2, 0, 1, 0])

    def test_go_to_base_overrides_manual(self):
        world, agent = build_world(base_pos=(0.0, 0.0, 10.0))
        intent = ActionDecoder().decode([2, 1, 0, 0, 1], world.snapshot(agent))
        assert intent == Intent(move=1)

    def test_base_precedence(self):
        world, agent = _world_target_right_base_ahead()
        intent = ActionDecoder(precedence="base").decode([0, 0, 0, 1, 1], world.snapshot(agent))
        assert intent == Intent(move=1)

    def test_target_precedence(self):
        world, agent = _world_target_right_base_ahead()
        intent = ActionDecoder(precedence="target").decode([0, 0, 0, 1, 1], world.snapshot(agent))
        assert intent == Intent(rotate=1)

    def test_target_precedence_falls_back_to_base(self):
        world, agent = build_world(base_pos=(0.0, 0.0, 10.0))
        intent = ActionDecoder(precedence="target").decode([0, 0, 0, 1, 1], world.snapshot(agent))
        assert intent == Intent(move=1)

    def test_sequential_last_writer_wins(self):
        world, agent = _world_target_right_base_ahead()
        intent = ActionDecoder(precedence="sequential").decode([0, 0, 0, 1, 1], world.snapshot(agent))
        # Target steering rotates, base steering then asserts forward on top
        assert intent == Intent(move=1, rotate=1)

    def test_sequential_keeps_manual_fields_steering_leaves_alone(self):
        # Target and base both to the right: only rotation is asserted
        world, agent = build_world(base_pos=(10.0, 0.0, 0.0),
                                   targets=[((5.0, 0.0, 0.0), Team.NONE, Team.NONE)])
        intent = ActionDecoder(precedence="sequential").decode([2, 0, 0, 1, 1], world.snapshot(agent))
        assert intent == Intent(move=-1, rotate=1)

    def test_unknown_precedence_rejected(self):
        with pytest.raises(ValueError):
            ActionDecoder(precedence="random")


class TestActionHelpers:

    def test_action_space_shape(self):
        space = action_space()
        assert tuple(space.nvec) == (3, 3, 2, 2, 2)
        assert space.sample() in space

    def test_action_from_keys(self):
        np.testing.assert_array_equal(action_from_keys({"I", "L", "Space"}), [1, 1, 1, 0, 0])
        np.testing.assert_array_equal(action_from_keys({"K", "J", "A", "S"}), [2, 2, 0, 1, 1])
        np.testing.assert_array_equal(action_from_keys({"Q"}), [0, 0, 0, 0, 0])

    def test_opposing_keys_last_binding_wins(self):
        np.testing.assert_array_equal(action_from_keys({"I", "K"}), [2, 0, 0, 0, 0])
