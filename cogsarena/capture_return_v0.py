"""Capture Return v0 - cogsarena team capture-and-return environment.

Top-level import convenience module following the MPE2 pattern.
"""

from cogsarena.capture_return.capture_return import env, raw_env, parallel_env

__all__ = ["env", "raw_env", "parallel_env"]
