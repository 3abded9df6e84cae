"""Tank kinematic model driven by discrete intents.

Arena agents translate along their forward axis and yaw in place about +y,
one discrete step per tick. Carrying targets slows an agent down linearly.
"""
import numpy as np

from cogsarena._cogsarena_utils.geometry import forward_axis
from cogsarena._cogsarena_utils.kinematics.base import KinematicsModel


class TankKinematics(KinematicsModel):
    """Constant-speed tank drive.

    State Representation:
        [x, y, z, ψ]
        - x, y, z: World position, y-up (units)
        - ψ: Yaw in degrees about +y, kept in [0, 360)

    Intent:
        - move ∈ {-1, 0, +1}: backward / none / forward
        - rotate ∈ {-1, 0, +1}: negative / none / positive yaw

    Discrete-Time Integration (Euler):
        ψ_{t+1} = ψ_t + rotate * turn_speed * dt
        p_{t+1} = p_t + move * v(load) * forward(ψ_{t+1}) * dt
        v(load) = move_speed * max(0, 1 - carry_slowdown * load)

    Attributes:
        dt (float): Integration time step (seconds)
        move_speed (float): Unloaded linear speed (units/s)
        turn_speed (float): Yaw rate (degrees/s)
        carry_slowdown (float): Fractional speed loss per carried target

    Example:
        >>> kinematics = TankKinematics(dt=0.1, move_speed=1.5)
        >>> state = np.array([0.0, 0.0, 0.0, 0.0])
        >>> kinematics.step(state, Intent(move=1))  # -> [0, 0, 0.15, 0]
    """

    def __init__(self, dt: float = 0.1, move_speed: float = 1.5,
                 turn_speed: float = 180.0, carry_slowdown: float = 0.05):
        super().__init__(dt)
        if move_speed < 0 or turn_speed < 0:
            raise ValueError("move_speed and turn_speed must be non-negative")
        self.move_speed = move_speed
        self.turn_speed = turn_speed
        self.carry_slowdown = carry_slowdown

    def max_speed(self, load: int = 0) -> float:
        return self.move_speed * max(0.0, 1.0 - self.carry_slowdown * load)

    def step(self, state: np.ndarray, intent, load: int = 0) -> np.ndarray:
        """Integrate one tick of tank motion.

        Intent values outside {-1, 0, +1} are clipped into that range.
        """
        position = np.asarray(state[:3], dtype=np.float64)
        yaw = float(state[3])

        rotate = int(np.clip(intent.rotate, -1, 1))
        move = int(np.clip(intent.move, -1, 1))

        yaw = (yaw + rotate * self.turn_speed * self.dt) % 360.0
        position = position + move * self.max_speed(load) * forward_axis(yaw) * self.dt

        return np.array([position[0], position[1], position[2], yaw], dtype=np.float64)
