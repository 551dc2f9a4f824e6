"""
Package domain models
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ...core.constants import (
    FILES_DIR,
    HOOKS_DIR,
    HOSTS_DIR,
    TAGS_DIR,
    PHASE_PRE_UP,
    PHASE_POST_UP,
    PHASE_PRE_DOWN,
    PHASE_POST_DOWN,
)


class Phase(str, Enum):
    """Lifecycle point at which hooks run"""
    PRE_UP = PHASE_PRE_UP
    POST_UP = PHASE_POST_UP
    PRE_DOWN = PHASE_PRE_DOWN
    POST_DOWN = PHASE_POST_DOWN


class TierKind(str, Enum):
    """Precedence level of a package subtree"""
    GLOBAL = "global"
    TAG = "tag"
    HOST = "host"


@dataclass(frozen=True)
class Tier:
    """
    One precedence level inside a package.

    Attributes:
        kind: global, tag or host
        root: Directory holding the tier's files/ and hooks/ subtrees
        name: Tag name or hostname (None for the global tier)
    """
    kind: TierKind
    root: Path
    name: Optional[str] = None

    @property
    def files_dir(self) -> Path:
        return self.root / FILES_DIR

    def hooks_dir(self, phase: Phase) -> Path:
        return self.root / HOOKS_DIR / phase.value

    def __str__(self) -> str:
        if self.name is None:
            return self.kind.value
        return f"{self.kind.value}:{self.name}"


@dataclass
class Package:
    """A named unit of managed files and hooks inside the repository"""
    name: str
    base: Path

    @classmethod
    def from_repo(cls, repo_dir: Path, name: str) -> "Package":
        return cls(name=name, base=repo_dir / name)

    def exists(self) -> bool:
        return self.base.is_dir()

    def global_tier(self) -> Tier:
        return Tier(TierKind.GLOBAL, self.base)

    def host_tier(self, hostname: str) -> Tier:
        return Tier(TierKind.HOST, self.base / HOSTS_DIR / hostname, hostname)

    def tag_tier(self, tag: str) -> Tier:
        return Tier(TierKind.TAG, self.base / TAGS_DIR / tag, tag)

    def file_tiers(self, hostname: str, tags: List[str]) -> List[Tier]:
        """Tiers in file precedence order: host, tags as supplied, global"""
        return (
            [self.host_tier(hostname)]
            + [self.tag_tier(tag) for tag in tags]
            + [self.global_tier()]
        )

    def hook_dirs(
        self, phase: Phase, hostname: str, tags: List[str]
    ) -> Tuple[Path, Path, List[Path]]:
        """
        Hook directories for one phase.

        Returns:
            (global_dir, host_dir, tag_dirs) with tag_dirs in supplied order
        """
        return (
            self.global_tier().hooks_dir(phase),
            self.host_tier(hostname).hooks_dir(phase),
            [self.tag_tier(tag).hooks_dir(phase) for tag in tags],
        )


@dataclass(frozen=True)
class FileEntry:
    """A leaf under a tier's files/ tree, keyed by its relative path"""
    tier: Tier
    relative: Path

    @property
    def source(self) -> Path:
        return self.tier.files_dir / self.relative


@dataclass(frozen=True)
class DirEntry:
    """A directory under a tier's files/ tree"""
    tier: Tier
    relative: Path


@dataclass
class ResolvedPlan:
    """
    Result of merging all tiers of one package.

    Attributes:
        directories: Absolute directories that must exist under the target
        mapping: Absolute destination -> absolute source, one per surviving FileEntry
    """
    directories: List[Path] = field(default_factory=list)
    mapping: Dict[Path, Path] = field(default_factory=dict)

    def destinations(self) -> List[Path]:
        return sorted(self.mapping)


@dataclass
class Args:
    """
    Resolved invocation bundle

    Attributes:
        repo_dir: Repository root holding one directory per package
        target_dir: Default target directory when no settings file applies
        hostname: Host tier to use
        tags: Active tags, in precedence order
        packages: Package names to process
        test: Report actions without touching the filesystem or running hooks
        force: Replace conflicting entries and skip ownership checks
        no_confirm: Do not prompt before each package
    """
    repo_dir: Path
    target_dir: Path
    hostname: str
    tags: List[str] = field(default_factory=list)
    packages: List[str] = field(default_factory=list)
    test: bool = False
    force: bool = False
    no_confirm: bool = False


class LinkOutcome(str, Enum):
    """Result of create_link"""
    CREATED = "created"
    UNCHANGED = "unchanged"
    REPLACED = "replaced"
    CONFLICT = "conflict"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self not in (LinkOutcome.CONFLICT, LinkOutcome.FAILED)


class RemoveOutcome(str, Enum):
    """Result of remove_link_if_owned"""
    ABSENT = "absent"
    REMOVED = "removed"
    SKIPPED = "skipped"
    FAILED = "failed"


class HookStatus(str, Enum):
    SUCCESS = "success"
    NON_ZERO = "non-zero"
    SIGNALED = "signaled"
    LAUNCH_FAILED = "launch-failed"


@dataclass
class HookResult:
    """
    Exit classification of one hook run.

    Attributes:
        path: Hook executable
        status: How the process ended
        code: Exit code (NON_ZERO) or signal number (SIGNALED)
        reason: Launch error message (LAUNCH_FAILED)
    """
    path: Path
    status: HookStatus
    code: Optional[int] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is HookStatus.SUCCESS

    def describe(self) -> str:
        if self.status is HookStatus.NON_ZERO:
            return f"Hook failed with status code: {self.code}"
        if self.status is HookStatus.SIGNALED:
            return f"Hook failed: terminated by signal {self.code}"
        if self.status is HookStatus.LAUNCH_FAILED:
            return f"Failed to execute hook: {self.reason}"
        return "Hook succeeded"
