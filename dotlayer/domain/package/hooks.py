"""
Hook collection and execution
"""
import os
import subprocess
from pathlib import Path
from typing import Dict, List

from ...core.logging import get_logger
from .models import HookResult, HookStatus

logger = get_logger(__name__)


# ============================================================
# Collection
# ============================================================

def _scan_hook_dir(directory: Path, table: Dict[str, Path]) -> None:
    """Add every regular file in directory to table, replacing same-named entries"""
    if not directory.is_dir():
        logger.debug(f"[hook] no hooks in {directory}")
        return

    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        logger.warning(f"[hook] cannot read {directory}: {e}")
        return

    for entry in entries:
        try:
            is_file = entry.is_file(follow_symlinks=False)
        except OSError as e:
            logger.warning(f"[hook] cannot stat {entry.path}: {e}")
            continue
        if is_file:
            table[entry.name] = Path(entry.path)


def collect_hooks(global_dir: Path, host_dir: Path, tag_dirs: List[Path]) -> Dict[str, Path]:
    """
    Build the name -> path table for one phase.

    Directories are scanned global, then each tag in the order given, then
    host. A later scan replaces an earlier hook of the same file name, so the
    host copy always wins and, among tags, the last listed tag wins.

    Returns:
        Mapping of hook file name to the executable that will run
    """
    table: Dict[str, Path] = {}
    _scan_hook_dir(global_dir, table)
    for tag_dir in tag_dirs:
        _scan_hook_dir(tag_dir, table)
    _scan_hook_dir(host_dir, table)
    return table


def ordered_hooks(table: Dict[str, Path]) -> List[Path]:
    """Hooks sorted by file name, byte-wise"""
    return [table[name] for name in sorted(table, key=os.fsencode)]


# ============================================================
# Execution
# ============================================================

def execute_hook(path: Path) -> HookResult:
    """
    Run a hook with no arguments, inheriting stdin/stdout/stderr.

    There is no timeout; a hook that never exits blocks the caller.

    Returns:
        HookResult classifying how the process ended
    """
    try:
        completed = subprocess.run([str(path)], check=False)
    except OSError as e:
        return HookResult(path, HookStatus.LAUNCH_FAILED, reason=str(e))

    code = completed.returncode
    if code == 0:
        return HookResult(path, HookStatus.SUCCESS, code=0)
    if code < 0:
        return HookResult(path, HookStatus.SIGNALED, code=-code)
    return HookResult(path, HookStatus.NON_ZERO, code=code)


def run_hooks(global_dir: Path, host_dir: Path, tag_dirs: List[Path], test_mode: bool) -> bool:
    """
    Execute all hooks of one phase.

    Process:
    1. Collect hooks across tiers (host > last tag > ... > first tag > global)
    2. Sort by file name
    3. Run each in turn, stopping at the first failure

    Args:
        global_dir: Package-wide phase directory
        host_dir: Host-specific phase directory
        tag_dirs: Tag-specific phase directories, in supplied tag order
        test_mode: Only report which hooks would run

    Returns:
        True if every hook succeeded (or would be run in test mode)
    """
    for path in ordered_hooks(collect_hooks(global_dir, host_dir, tag_dirs)):
        if test_mode:
            logger.info(f"[test] would execute hook {path}")
            continue

        logger.info(f"[hook] executing {path.name}")
        result = execute_hook(path)
        if not result.ok:
            logger.error(f"[hook] {path}: {result.describe()}")
            return False

    return True
