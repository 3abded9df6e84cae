"""cogsarena utilities package.

Contains shared utilities for all cogsarena environments:
- core: data model, World container and read-only snapshots
- geometry: frame transforms and safe vector helpers
- kinematics: motion models that apply resolved intents
- logging_utils: logging configuration helpers
"""

from cogsarena._cogsarena_utils import core, geometry, kinematics, logging_utils

__all__ = ["core", "geometry", "kinematics", "logging_utils"]
