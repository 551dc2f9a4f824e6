"""
Layer resolution: merge global, tag and host tiers into one plan
"""
import os
from pathlib import Path
from typing import Dict, List, Set, Tuple

from ...core.logging import get_logger
from .models import DirEntry, FileEntry, Package, ResolvedPlan, Tier

logger = get_logger(__name__)


# ============================================================
# Tier Scanning
# ============================================================

def _walk(tier: Tier, directory: Path, dirs: List[DirEntry], files: List[FileEntry]) -> None:
    """Recursive scan; directories are descended, files and symlinks are leaves"""
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning(f"[resolve] cannot read {directory} ({tier}): {e}")
        return

    for entry in entries:
        path = Path(entry.path)
        relative = path.relative_to(tier.files_dir)
        if entry.is_dir(follow_symlinks=False):
            dirs.append(DirEntry(tier, relative))
            _walk(tier, path, dirs, files)
        else:
            files.append(FileEntry(tier, relative))


def scan_tier(tier: Tier) -> Tuple[List[DirEntry], List[FileEntry]]:
    """
    Enumerate the files/ subtree of a tier.

    A missing subtree is not an error and yields nothing. An unreadable one
    is logged and treated as empty.

    Returns:
        (directories, files), both relative to the tier's files/ root
    """
    dirs: List[DirEntry] = []
    files: List[FileEntry] = []

    root = tier.files_dir
    if not root.is_dir():
        logger.debug(f"[resolve] no files for tier {tier}")
        return dirs, files

    _walk(tier, root, dirs, files)
    return dirs, files


# ============================================================
# Resolution
# ============================================================

def resolve(package: Package, target_dir: Path, hostname: str, tags: List[str]) -> ResolvedPlan:
    """
    Compute the directories and destination -> source mapping for a package.

    Tiers are visited host first, then tags in the order given, then global.
    The first tier to claim a destination keeps it, so host beats every tag,
    an earlier tag beats a later one, and any tag beats global. Directories
    are collected from all tiers regardless of precedence.

    Args:
        package: Package to resolve
        target_dir: Absolute directory the package is projected into
        hostname: Active host tier
        tags: Active tags, in precedence order

    Returns:
        ResolvedPlan
    """
    directories: Set[Path] = set()
    mapping: Dict[Path, Path] = {}

    for tier in package.file_tiers(hostname, tags):
        tier_dirs, tier_files = scan_tier(tier)

        for d in tier_dirs:
            directories.add(target_dir / d.relative)

        for f in tier_files:
            dest = target_dir / f.relative
            if dest in mapping:
                logger.debug(f"[resolve] {f.source} shadowed by {mapping[dest]}")
                continue
            mapping[dest] = f.source

    return ResolvedPlan(directories=sorted(directories), mapping=mapping)
