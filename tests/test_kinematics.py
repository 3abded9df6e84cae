"""Tests for kinematic models."""
import numpy as np
import pytest

from cogsarena._cogsarena_utils.core import Intent
from cogsarena._cogsarena_utils.kinematics import KinematicsModel, TankKinematics


class TestTankKinematics:
    """Test suite for the tank drive model."""

    def test_dimensions(self):
        model = TankKinematics(dt=0.1)
        assert model.state_dim == 4
        assert model.get_velocity_bounds() == (-1.5, 1.5)

    def test_forward_step_along_heading(self):
        model = TankKinematics(dt=0.1, move_speed=1.5)
        state = np.array([0.0, 0.0, 0.0, 0.0])

        new_state = model.step(state, Intent(move=1))

        np.testing.assert_allclose(new_state, [0.0, 0.0, 0.15, 0.0], atol=1e-12)

    def test_backward_step(self):
        model = TankKinematics(dt=0.1, move_speed=1.5)
        new_state = model.step(np.array([0.0, 0.0, 0.0, 90.0]), Intent(move=-1))
        np.testing.assert_allclose(new_state[:3], [-0.15, 0.0, 0.0], atol=1e-12)

    def test_rotation_happens_before_translation(self):
        model = TankKinematics(dt=0.5, move_speed=1.0, turn_speed=180.0)
        new_state = model.step(np.array([0.0, 0.0, 0.0, 0.0]), Intent(move=1, rotate=1))
        assert model.get_orientation(new_state) == pytest.approx(90.0)
        np.testing.assert_allclose(model.get_position(new_state), [0.5, 0.0, 0.0], atol=1e-12)

    @pytest.mark.parametrize("yaw, rotate, expected", [
        (350.0, 1, 8.0),
        (5.0, -1, 347.0),
    ])
    def test_yaw_wraps(self, yaw, rotate, expected):
        model = TankKinematics(dt=0.1, turn_speed=180.0)
        new_state = model.step(np.array([0.0, 0.0, 0.0, yaw]), Intent(rotate=rotate))
        assert new_state[3] == pytest.approx(expected)

    def test_null_intent_keeps_pose(self):
        model = TankKinematics()
        state = np.array([1.0, 0.0, -2.0, 45.0])
        np.testing.assert_array_equal(model.step(state, Intent()), state)

    def test_out_of_range_intent_is_clipped(self):
        model = TankKinematics(dt=0.1, move_speed=1.0)
        new_state = model.step(np.array([0.0, 0.0, 0.0, 0.0]), Intent(move=5))
        assert new_state[2] == pytest.approx(0.1)

    def test_carrying_slows_down(self):
        model = TankKinematics(move_speed=2.0, carry_slowdown=0.1)
        assert model.max_speed(0) == pytest.approx(2.0)
        assert model.max_speed(3) == pytest.approx(1.4)
        assert model.max_speed(20) == 0.0

        loaded = model.step(np.zeros(4), Intent(move=1), load=3)
        assert loaded[2] == pytest.approx(0.14)

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            TankKinematics(dt=0.0)
        with pytest.raises(ValueError):
            TankKinematics(move_speed=-1.0)

    def test_custom_model(self):
        class Stationary(KinematicsModel):
            def max_speed(self, load=0):
                return 0.0

            def step(self, state, intent, load=0):
                return state.copy()

        model = Stationary(dt=0.2)
        state = np.array([1.0, 2.0, 3.0, 4.0])
        np.testing.assert_array_equal(model.step(state, Intent(move=1)), state)
        assert model.get_velocity_bounds() == (0.0, 0.0)
