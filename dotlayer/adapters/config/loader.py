"""
Settings loader: target directory selection from settings.toml
"""
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ...core.constants import SETTINGS_FILE
from ...core.exceptions import ConfigError
from ...core.interfaces import TargetProvider
from ...core.logging import get_logger
from ...core.utils import substitute_variables

logger = get_logger(__name__)


@dataclass
class TargetEntry:
    """Candidate target directory, before variable substitution"""
    path: str


@dataclass
class Settings:
    """Parsed settings.toml"""
    target: List[TargetEntry] = field(default_factory=list)
    source: Optional[Path] = None


class SettingsLoader(TargetProvider):
    """
    Loads settings files and picks the effective target directory.

    Priority: package settings.toml > repository settings.toml > default.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML settings file"""
        try:
            return tomllib.loads(path.read_text(encoding='utf-8'))
        except OSError as e:
            raise ConfigError(f"Cannot read settings file {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse settings file {path}: {e}") from e

    def parse(self, data: Dict[str, Any], source: Optional[Path] = None) -> Settings:
        """
        Validate the shape of a settings document.

        Raises:
            ConfigError: If ``target`` is missing or malformed
        """
        where = source or "settings"
        targets = data.get("target")
        if not isinstance(targets, list):
            raise ConfigError(f"{where}: 'target' must be an array of tables")

        entries = []
        for i, item in enumerate(targets):
            if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                raise ConfigError(f"{where}: target[{i}] must have a string 'path'")
            entries.append(TargetEntry(path=item["path"]))

        return Settings(target=entries, source=source)

    def load(self, path: Path) -> Optional[Settings]:
        """Load a settings file, or None if there is none"""
        if not path.is_file():
            return None
        logger.debug(f"[settings] loading {path}")
        return self.parse(self.load_toml(path), source=path)

    def select_target(self, settings: Settings) -> Optional[Path]:
        """
        First candidate that expands to an absolute, existing directory.

        Raises:
            SubstitutionError: If a candidate has a malformed ${VAR} expression
        """
        for entry in settings.target:
            candidate = Path(substitute_variables(entry.path, self._environ))
            if candidate.is_absolute() and candidate.is_dir():
                return candidate
            logger.debug(f"[settings] skipping target candidate {candidate}")
        return None

    def target_from(self, settings_path: Path, fallback: Path) -> Path:
        """Target selected by settings_path, or fallback if absent or unresolvable"""
        settings = self.load(settings_path)
        if settings is None:
            return fallback

        target = self.select_target(settings)
        if target is None:
            logger.warning(f"[settings] no valid target in {settings_path}, using {fallback}")
            return fallback
        return target

    def global_target(self, repo_dir: Path, default: Path) -> Path:
        """Target chosen by the repository-level settings file"""
        return self.target_from(repo_dir / SETTINGS_FILE, default)

    def package_target(self, package_base: Path, inherited: Path) -> Path:
        """
        Target chosen by a package settings file, falling back to inherited.

        Raises:
            ConfigError: If the resulting target is not an existing absolute directory
        """
        target = self.target_from(package_base / SETTINGS_FILE, inherited)
        validate_target(target)
        return target


def validate_target(target: Path) -> None:
    """Raise ConfigError unless target is an existing absolute directory"""
    if not target.is_absolute():
        raise ConfigError(f"Target {target} is not an absolute path")
    if not target.is_dir():
        raise ConfigError(f"Target {target} is not an existing directory")
