"""
dotlayer - layered dotfile manager

Projects packages of files from a repository into a target directory as
symbolic links, supporting:
- Global, tag-specific and host-specific file tiers with fixed precedence
- Pre/post hooks around linking and unlinking
- Ownership-checked removal of previously created links
- Adding existing files to a package
"""

__version__ = "0.1.0"

# Export core components
from .core import (
    ConfigError,
    DotlayerError,
    setup_logging,
    substitute_variables,
)

# Export domain models
from .domain.package import (
    Args,
    FileSystem,
    Package,
    PackageService,
    Phase,
    ResolvedPlan,
    resolve,
    run_hooks,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "ConfigError",
    "DotlayerError",
    "setup_logging",
    "substitute_variables",
    # Package domain
    "Args",
    "FileSystem",
    "Package",
    "PackageService",
    "Phase",
    "ResolvedPlan",
    "resolve",
    "run_hooks",
]
