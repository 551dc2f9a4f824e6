"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import PromptProvider, TargetProvider
from .utils import substitute_variables, expand_path, is_descendant

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "PromptProvider",
    "TargetProvider",
    "substitute_variables",
    "expand_path",
    "is_descendant",
    "DotlayerError",
    "ConfigError",
    "SubstitutionError",
    "PackageError",
]
