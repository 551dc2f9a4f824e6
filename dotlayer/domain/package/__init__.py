"""
Package domain module
"""
from .models import (
    Args,
    DirEntry,
    FileEntry,
    HookResult,
    HookStatus,
    LinkOutcome,
    Package,
    Phase,
    RemoveOutcome,
    ResolvedPlan,
    Tier,
    TierKind,
)
from .resolver import resolve, scan_tier
from .filesystem import FileSystem
from .hooks import collect_hooks, execute_hook, ordered_hooks, run_hooks
from .service import PackageService

__all__ = [
    "Args",
    "DirEntry",
    "FileEntry",
    "HookResult",
    "HookStatus",
    "LinkOutcome",
    "Package",
    "Phase",
    "RemoveOutcome",
    "ResolvedPlan",
    "Tier",
    "TierKind",
    "resolve",
    "scan_tier",
    "FileSystem",
    "collect_hooks",
    "execute_hook",
    "ordered_hooks",
    "run_hooks",
    "PackageService",
]
