"""Shared helpers below the painter package.

    - fs: atomic writes for snapshots and previews, YAML loading
    - logging_config: root logger setup and context fields
    - validators: palette snapshot schema

Nothing in painter_utils/ imports from robot_painter.
"""

from . import fs
from . import logging_config
from . import validators

from .logging_config import log_context, push_context, setup_logging

__all__ = [
    'fs',
    'logging_config',
    'validators',
    'setup_logging',
    'push_context',
    'log_context',
]
