"""
Unified exception definitions
"""


class DotlayerError(Exception):
    """Base exception class"""
    pass


class ConfigError(DotlayerError):
    """Configuration error"""
    pass


class SubstitutionError(ConfigError):
    """Invalid ${VAR} expression in a settings path"""
    pass


class PackageError(DotlayerError):
    """Package layout error"""
    pass
