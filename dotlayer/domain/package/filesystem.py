"""
Filesystem sync: directory creation, symlink creation and owned removal
"""
import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, Optional

from ...core.logging import get_logger
from ...core.utils import is_descendant
from .models import LinkOutcome, RemoveOutcome

logger = get_logger(__name__)


# ============================================================
# Helpers
# ============================================================

def _lexists(path: Path) -> bool:
    """True for any directory entry, including dangling symlinks"""
    return os.path.lexists(path)


def _blocking_entry(directory: Path) -> Optional[Path]:
    """First path component that exists but is not a directory, if any"""
    for candidate in (*reversed(directory.parents), directory):
        if _lexists(candidate) and not candidate.is_dir():
            return candidate
    return None


def _canonical(path: Path) -> Optional[Path]:
    """Fully resolved path, or None if the symlink chain cannot be followed"""
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return None


def remove_entry(path: Path) -> None:
    """Remove a link, file or real directory (recursively)"""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


# ============================================================
# File System
# ============================================================

class FileSystem:
    """
    Applies a resolved plan to the target directory.

    Only symlinks and directories under the target are created or removed.
    In test mode every method reports what it would do and performs no I/O
    that mutates the filesystem.
    """

    def __init__(self, force: bool = False):
        """
        Args:
            force: Replace conflicting entries and remove entries of unknown ownership
        """
        self.force = force

    # ------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------

    def ensure_directories(self, directories: Iterable[Path], test_mode: bool) -> bool:
        """
        Create each directory and its parents if absent.

        A failure is logged and the remaining directories are still attempted.

        Returns:
            True if every directory exists (or would be created in test mode)
        """
        ok = True
        for directory in sorted(directories):
            if test_mode:
                blocker = _blocking_entry(directory)
                if blocker is not None:
                    logger.warning(
                        f"[test] would fail to create directory {directory}: "
                        f"{blocker} is not a directory"
                    )
                elif not directory.is_dir():
                    logger.info(f"[test] would create directory {directory}")
                continue
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"[mkdir] creating {directory} failed: {e}")
                ok = False
        return ok

    # ------------------------------------------------------------
    # Linking
    # ------------------------------------------------------------

    def create_link(self, destination: Path, source: Path, test_mode: bool) -> LinkOutcome:
        """
        Make destination a symlink to source.

        - absent destination: link it
        - symlink already resolving to source: nothing to do
        - anything else: conflict, unless force is set, in which case the
          existing entry is removed first

        Returns:
            LinkOutcome
        """
        if not _lexists(destination):
            if test_mode:
                logger.info(f"[test] would link {destination} -> {source}")
                return LinkOutcome.CREATED
            try:
                destination.symlink_to(source)
            except OSError as e:
                logger.error(f"[link] {destination} -> {source} failed: {e}")
                return LinkOutcome.FAILED
            logger.info(f"[link] {destination} -> {source}")
            return LinkOutcome.CREATED

        if destination.is_symlink():
            current = _canonical(destination)
            if current is not None and current == _canonical(source):
                logger.debug(f"[link] {destination} already points to {source}")
                return LinkOutcome.UNCHANGED

        if not self.force:
            logger.error(f"[link] {destination} exists and differs, not overwriting")
            return LinkOutcome.CONFLICT

        if test_mode:
            logger.info(f"[test] would replace {destination} with link to {source}")
            return LinkOutcome.REPLACED

        try:
            remove_entry(destination)
            destination.symlink_to(source)
        except OSError as e:
            logger.error(f"[link] replacing {destination} failed: {e}")
            return LinkOutcome.FAILED

        logger.info(f"[link] replaced {destination} -> {source}")
        return LinkOutcome.REPLACED

    def sync_links(self, mapping: Dict[Path, Path], test_mode: bool) -> bool:
        """
        Create every link in mapping.

        All destinations are attempted before reporting, so one conflict
        does not block unrelated links.
        """
        ok = True
        for dest in sorted(mapping):
            if not self.create_link(dest, mapping[dest], test_mode).ok:
                ok = False
        return ok

    # ------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------

    def remove_link_if_owned(self, destination: Path, package_base: Path, test_mode: bool) -> RemoveOutcome:
        """
        Remove destination if it resolves into the package base.

        Entries pointing elsewhere, and entries whose target cannot be
        resolved, are left alone unless force is set.

        Returns:
            RemoveOutcome
        """
        if not _lexists(destination):
            return RemoveOutcome.ABSENT

        canonical = _canonical(destination)
        if canonical is None:
            logger.warning(f"[remove] cannot resolve {destination}, ownership unknown")
            if not self.force:
                return RemoveOutcome.SKIPPED
        elif not is_descendant(canonical, _canonical(package_base) or package_base):
            if not self.force:
                logger.warning(
                    f"[remove] {destination} does not point to package base, not removing"
                )
                return RemoveOutcome.SKIPPED

        if test_mode:
            logger.info(f"[test] would remove {destination}")
            return RemoveOutcome.REMOVED

        try:
            remove_entry(destination)
        except OSError as e:
            logger.error(f"[remove] failed to remove {destination}: {e}")
            return RemoveOutcome.FAILED

        logger.info(f"[remove] {destination}")
        return RemoveOutcome.REMOVED

    def remove_links(self, destinations: Iterable[Path], package_base: Path, test_mode: bool) -> bool:
        """Remove owned destinations, stopping at the first I/O failure"""
        for dest in sorted(destinations):
            if self.remove_link_if_owned(dest, package_base, test_mode) is RemoveOutcome.FAILED:
                return False
        return True
