"""
Shared pytest fixtures for the dotlayer test suite.

Pattern:
  1. Create a temp repository with packages laid out on disk.
  2. Create a temp target directory standing in for $HOME.
  3. Run the domain code (or the CLI) against both.
  4. Assert on symlinks, directories and hook side effects.
"""

from pathlib import Path

import pytest

from dotlayer.domain.package import Args


HOSTNAME = "laptop"


class MiniRepo:
    """Helper returned by the repo fixture."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def tier_root(self, package: str, host: str | None = None, tag: str | None = None) -> Path:
        base = self._root / package
        if host is not None:
            return base / "hosts" / host
        if tag is not None:
            return base / "tags" / tag
        return base

    def add_file(
        self,
        package: str,
        relative: str,
        content: str = "",
        host: str | None = None,
        tag: str | None = None,
    ) -> Path:
        path = self.tier_root(package, host, tag) / "files" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def add_hook(
        self,
        package: str,
        phase: str,
        name: str,
        body: str = "exit 0",
        host: str | None = None,
        tag: str | None = None,
        executable: bool = True,
    ) -> Path:
        path = self.tier_root(package, host, tag) / "hooks" / phase / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(0o755 if executable else 0o644)
        return path

    def add_logging_hook(
        self,
        package: str,
        phase: str,
        name: str,
        log: Path,
        label: str | None = None,
        exit_code: int = 0,
        **tier,
    ) -> Path:
        """Hook that appends its label to log, then exits with exit_code"""
        label = label or name
        return self.add_hook(
            package,
            phase,
            name,
            body=f'echo "{label}" >> "{log}"\nexit {exit_code}',
            **tier,
        )

    def write_settings(self, targets: list[str], package: str | None = None) -> Path:
        base = self._root / package if package else self._root
        base.mkdir(parents=True, exist_ok=True)
        path = base / "settings.toml"
        lines = []
        for t in targets:
            lines.append("[[target]]")
            lines.append(f'path = "{t}"')
        path.write_text("\n".join(lines) + "\n")
        return path


@pytest.fixture
def repo(tmp_path) -> MiniRepo:
    root = tmp_path / "repo"
    root.mkdir()
    return MiniRepo(root)


@pytest.fixture
def target(tmp_path) -> Path:
    """Fresh temp directory acting as the home directory."""
    d = tmp_path / "home"
    d.mkdir()
    return d


@pytest.fixture
def hook_log(tmp_path) -> Path:
    return tmp_path / "hooks.log"


@pytest.fixture
def make_args(repo, target):
    """Returns a callable building Args for the temp repo and target."""

    def _make(*packages: str, **overrides) -> Args:
        values = dict(
            repo_dir=repo.root,
            target_dir=target,
            hostname=HOSTNAME,
            tags=[],
            packages=list(packages),
            no_confirm=True,
        )
        values.update(overrides)
        return Args(**values)

    return _make


def read_log(log: Path) -> list[str]:
    if not log.exists():
        return []
    return log.read_text().split()


def snapshot(directory: Path) -> dict:
    """Map of every entry under directory to (kind, link target)"""
    result = {}
    for path in sorted(directory.rglob("*")):
        if path.is_symlink():
            result[path] = ("link", str(path.readlink()))
        elif path.is_dir():
            result[path] = ("dir", None)
        else:
            result[path] = ("file", path.read_text())
    return result
