"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from pathlib import Path


class TargetProvider(ABC):
    """Target directory selection interface"""

    @abstractmethod
    def global_target(self, repo_dir: Path, default: Path) -> Path:
        """Target for the whole repository"""
        pass

    @abstractmethod
    def package_target(self, package_base: Path, inherited: Path) -> Path:
        """Target for one package, given the repository-level target"""
        pass


class PromptProvider(ABC):
    """User prompt interface"""

    @abstractmethod
    def confirm(self, message: str, default: bool = True) -> bool:
        """Prompt user for confirmation"""
        pass
