"""
Package service - install, uninstall and add pipelines
"""
import os
import shutil
from pathlib import Path
from typing import Callable, Optional

from ...core.exceptions import ConfigError, PackageError
from ...core.interfaces import PromptProvider, TargetProvider
from ...core.logging import get_logger
from .filesystem import FileSystem, remove_entry
from .hooks import run_hooks
from .models import Args, Package, Phase
from .resolver import resolve

logger = get_logger(__name__)

Pipeline = Callable[[Package, Path], bool]


class PackageService:
    """
    Package service - pure business logic.

    Runs the per-package pipelines:
    - install:   pre-up hooks -> create directories -> link files -> post-up hooks
    - uninstall: pre-down hooks -> compute destinations -> remove links -> post-down hooks

    A failing stage stops that package's pipeline; remaining packages are
    still processed and the overall result is False.
    """

    def __init__(
        self,
        args: Args,
        target_provider: TargetProvider,
        prompt_provider: Optional[PromptProvider] = None,
        on_package: Optional[Callable[[str, str, Path, Path], None]] = None,
        on_skip: Optional[Callable[[str], None]] = None,
        on_stage: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize package service.

        Args:
            args: Resolved invocation bundle
            target_provider: Settings-backed target directory selection
            prompt_provider: Used for per-package confirmation (None: never ask)
            on_package: Callback before a package is processed
                (action, name, repository path, target path)
            on_skip: Callback when the user declines a package (name)
            on_stage: Callback when a pipeline stage starts (description)
        """
        self.args = args
        self.target_provider = target_provider
        self.prompt_provider = prompt_provider
        self.on_package = on_package
        self.on_skip = on_skip
        self.on_stage = on_stage
        self.fs = FileSystem(force=args.force)

    # ============================================================
    # Public operations
    # ============================================================

    def install(self) -> bool:
        """Install every requested package; True if all succeeded"""
        return self._run_packages("install", self.install_package)

    def uninstall(self) -> bool:
        """Uninstall every requested package; True if all succeeded"""
        return self._run_packages("uninstall", self.uninstall_package)

    def install_package(self, package: Package, target: Path) -> bool:
        args = self.args

        self._stage("Executing pre-up hooks")
        if not self._run_phase(package, Phase.PRE_UP):
            return False

        plan = resolve(package, target, args.hostname, args.tags)

        self._stage("Creating parent dirs where required")
        if not self.fs.ensure_directories(plan.directories, args.test):
            logger.error(f"Creating directories for {package.name} failed")
            return False

        self._stage("Creating links")
        if not self.fs.sync_links(plan.mapping, args.test):
            logger.error(
                "One or more files failed to link, exiting without running post-up hooks"
            )
            return False

        self._stage("Executing post-up hooks")
        return self._run_phase(package, Phase.POST_UP)

    def uninstall_package(self, package: Package, target: Path) -> bool:
        args = self.args

        self._stage("Executing pre-down hooks")
        if not self._run_phase(package, Phase.PRE_DOWN):
            return False

        destinations = resolve(package, target, args.hostname, args.tags).destinations()

        self._stage("Removing links")
        if not self.fs.remove_links(destinations, package.base, args.test):
            logger.error(f"Removing links for {package.name} failed, not running post-down hooks")
            return False

        self._stage("Executing post-down hooks")
        return self._run_phase(package, Phase.POST_DOWN)

    def add(
        self,
        package_name: str,
        filename: Path,
        host_specific: bool = False,
        tag: Optional[str] = None,
    ) -> bool:
        """
        Move a file from the target directory into a package and link it back.

        Args:
            package_name: Package receiving the file
            filename: Absolute path of the file inside the target directory
            host_specific: Store under hosts/<hostname>/files
            tag: Store under tags/<tag>/files

        Returns:
            True on success or when the user declines

        Raises:
            ConfigError: If the file is outside the target directory or the
                options are contradictory
            PackageError: If the file does not exist
        """
        args = self.args
        if host_specific and tag:
            raise ConfigError("A file can be host-specific or tag-specific, not both")

        package = Package.from_repo(args.repo_dir, package_name)
        target = self._package_target(package)

        try:
            relative = filename.relative_to(target)
        except ValueError:
            raise ConfigError(f"File to add must be in the target directory {target}")
        if relative == Path("."):
            raise ConfigError("Cannot add the target directory itself")
        if not os.path.lexists(filename):
            raise PackageError(f"{filename} does not exist")

        if host_specific:
            tier = package.host_tier(args.hostname)
        elif tag:
            tier = package.tag_tier(tag)
        else:
            tier = package.global_tier()
        stored = tier.files_dir / relative

        if self.on_package:
            self.on_package("add", package_name, stored, filename)
        if not self._confirm():
            if self.on_skip:
                self.on_skip(package_name)
            return True

        if os.path.lexists(stored):
            if not args.force:
                logger.error(f"{stored} exists in repository, not overwriting")
                return False
            if args.test:
                logger.info(f"[test] would overwrite {stored}")
            else:
                try:
                    remove_entry(stored)
                except OSError as e:
                    logger.error(f"Failed to remove {stored}: {e}")
                    return False
                logger.info(f"Deleted {stored}")

        if args.test:
            logger.info(f"[test] would move {filename} -> {stored}")
            logger.info(f"[test] would link {filename} -> {stored}")
            return True

        try:
            stored.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed creating directory {stored.parent}: {e}")
            return False

        try:
            shutil.move(str(filename), str(stored))
        except OSError as e:
            logger.error(f"Moving file to repository failed: {e}")
            return False
        logger.info(f"[add] {filename} -> {stored}")

        return self.fs.create_link(filename, stored, test_mode=False).ok

    # ============================================================
    # Internals
    # ============================================================

    def _run_packages(self, action: str, pipeline: Pipeline) -> bool:
        """
        Run pipeline for each requested package, in order.

        Raises:
            ConfigError: If the repository settings file is invalid
        """
        args = self.args
        global_target = self.target_provider.global_target(args.repo_dir, args.target_dir)

        success = True
        for name in args.packages:
            package = Package.from_repo(args.repo_dir, name)
            if not package.exists():
                logger.error(f"Package {name} not found in {args.repo_dir}")
                success = False
                continue

            try:
                target = self.target_provider.package_target(package.base, global_target)
            except ConfigError as e:
                logger.error(f"Package {name}: {e}")
                success = False
                continue

            if self.on_package:
                self.on_package(action, name, package.base, target)

            if not self._confirm():
                if self.on_skip:
                    self.on_skip(name)
                continue

            if not pipeline(package, target):
                logger.error(f"Failed to {action} {name}")
                success = False

        return success

    def _package_target(self, package: Package) -> Path:
        args = self.args
        global_target = self.target_provider.global_target(args.repo_dir, args.target_dir)
        return self.target_provider.package_target(package.base, global_target)

    def _confirm(self) -> bool:
        args = self.args
        if args.test or args.no_confirm or self.prompt_provider is None:
            return True
        return self.prompt_provider.confirm("Continue?", default=True)

    def _run_phase(self, package: Package, phase: Phase) -> bool:
        global_dir, host_dir, tag_dirs = package.hook_dirs(phase, self.args.hostname, self.args.tags)
        return run_hooks(global_dir, host_dir, tag_dirs, self.args.test)

    def _stage(self, message: str) -> None:
        if self.on_stage:
            self.on_stage(message)
