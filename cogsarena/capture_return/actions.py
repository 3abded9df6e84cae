"""Action decoding: 5-slot discrete selections to per-tick intents.

Action selection layout (gymnasium MultiDiscrete([3, 3, 2, 2, 2])):

    slot 0  translation   0 none, 1 forward, 2 backward
    slot 1  rotation      0 none, 1 positive yaw (right), 2 negative yaw (left)
    slot 2  effect        1 enable the targeting effect, anything else disables
    slot 3  go-to-target  1 steer to the nearest eligible target
    slot 4  go-to-base    1 steer to the own base

Values a slot does not recognise are treated as that slot's no-op.
Navigation slots replace the manual move/rotate intent with the steering
result; the effect toggle always comes from slot 2.
"""
import numpy as np
from gymnasium import spaces

from cogsarena._cogsarena_utils.core import Intent
from cogsarena.capture_return.navigation import (
    DEFAULT_NAVIGATION,
    find_nearest_eligible_target,
    steer_to_base,
    steer_toward,
)

ACTION_NVEC = (3, 3, 2, 2, 2)
N_SLOTS = len(ACTION_NVEC)

FORWARD_SLOT, ROTATE_SLOT, EFFECT_SLOT, TARGET_SLOT, BASE_SLOT = range(N_SLOTS)

_MOVE_BY_VALUE = {0: 0, 1: 1, 2: -1}
_ROTATE_BY_VALUE = {0: 0, 1: 1, 2: -1}

# When both navigation slots are set:
#   "base"        only base-return steering is applied
#   "target"      only nearest-target steering is applied (falls back to
#                 base-return when no target is eligible)
#   "sequential"  manual intent, then target steering, then base steering;
#                 each steering step writes only the field it asserts
PRECEDENCES = ("base", "target", "sequential")

# Manual control bindings: key name -> (slot, value)
KEYMAP = {
    "I": (FORWARD_SLOT, 1),
    "K": (FORWARD_SLOT, 2),
    "L": (ROTATE_SLOT, 1),
    "J": (ROTATE_SLOT, 2),
    "Space": (EFFECT_SLOT, 1),
    "A": (TARGET_SLOT, 1),
    "S": (BASE_SLOT, 1),
}


def action_space():
    return spaces.MultiDiscrete(np.array(ACTION_NVEC))


def action_from_keys(pressed) -> np.ndarray:
    """Build an action selection from a collection of pressed key names.

    Later bindings of the same slot win, so holding "I" and "K" together
    drives backward. Unknown keys are ignored.
    """
    action = np.zeros(N_SLOTS, dtype=np.int64)
    for key, (slot, value) in KEYMAP.items():
        if key in pressed:
            action[slot] = value
    return action


def _as_slots(action):
    slots = np.asarray(action).reshape(-1)
    if slots.shape[0] != N_SLOTS:
        raise ValueError(f"Action selection must have {N_SLOTS} slots, got {slots.shape[0]}")
    return [int(value) for value in slots]


def _overlay(base_intent, steering):
    """Apply a steering intent on top of another, field by field."""
    return Intent(
        move=steering.move if steering.move else base_intent.move,
        rotate=steering.rotate if steering.rotate else base_intent.rotate,
        effect=base_intent.effect,
    )


class ActionDecoder:
    """Resolves action selections into intents for one arena configuration.

    Attributes:
        nav_config (NavigationConfig): Settings for the navigation heuristic.
        precedence (str): Resolution when both navigation slots are set.
    """

    def __init__(self, nav_config=DEFAULT_NAVIGATION, precedence="base"):
        if precedence not in PRECEDENCES:
            raise ValueError(f"precedence must be one of {PRECEDENCES}, got {precedence!r}")
        self.nav_config = nav_config
        self.precedence = precedence

    def manual_intent(self, action) -> Intent:
        """Intent from slots 0-2 alone, ignoring navigation."""
        slots = _as_slots(action)
        return Intent(
            move=_MOVE_BY_VALUE.get(slots[FORWARD_SLOT], 0),
            rotate=_ROTATE_BY_VALUE.get(slots[ROTATE_SLOT], 0),
            effect=slots[EFFECT_SLOT] == 1,
        )

    def decode(self, action, snapshot) -> Intent:
        """Resolve a full action selection against a snapshot.

        Args:
            action: Sequence of 5 integers.
            snapshot (WorldSnapshot): View used by the navigation heuristic.

        Returns:
            Intent: Resolved move/rotate/effect intent.

        Raises:
            ValueError: If `action` does not have exactly 5 slots.
        """
        slots = _as_slots(action)
        intent = self.manual_intent(slots)
        go_target = slots[TARGET_SLOT] == 1
        go_base = slots[BASE_SLOT] == 1

        if go_target and go_base:
            if self.precedence == "base":
                go_target = False
            elif self.precedence == "target":
                if self._target_steering(snapshot) is not None:
                    go_base = False
                else:
                    go_target = False

        if self.precedence == "sequential" and go_target and go_base:
            steering = self._target_steering(snapshot)
            if steering is not None:
                intent = _overlay(intent, steering)
            return _overlay(intent, steer_to_base(snapshot, self.nav_config))

        if go_target:
            steering = self._target_steering(snapshot)
            if steering is not None:
                intent = self._replace(intent, steering)
        elif go_base:
            intent = self._replace(intent, steer_to_base(snapshot, self.nav_config))
        return intent

    def _target_steering(self, snapshot):
        target = find_nearest_eligible_target(snapshot, self.nav_config)
        if target is None:
            return None
        return steer_toward(snapshot, target.position, self.nav_config)

    @staticmethod
    def _replace(intent, steering):
        return Intent(move=steering.move, rotate=steering.rotate, effect=intent.effect)
