"""Tests for the install / uninstall / add pipelines.

Covers:
  1. Hooks run around linking in the right order
  2. Stage failures abort the package but not the batch
  3. Idempotent install and test-mode purity
  4. Ownership-checked uninstall
  5. Adding files from the target into a package
"""

import pytest

from dotlayer.adapters.config.loader import SettingsLoader
from dotlayer.core.exceptions import ConfigError, PackageError
from dotlayer.core.interfaces import PromptProvider
from dotlayer.domain.package import FileSystem, LinkOutcome, Package, PackageService, resolve

from conftest import HOSTNAME, read_log, snapshot


class ScriptedPrompt(PromptProvider):
    """Answers confirmation prompts from a fixed list."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.asked = 0

    def confirm(self, message: str, default: bool = True) -> bool:
        self.asked += 1
        return self.answers.pop(0)


def make_service(args, prompt=None, **callbacks) -> PackageService:
    return PackageService(args, SettingsLoader(), prompt_provider=prompt, **callbacks)


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------


def test_install_links_files_and_runs_hooks(repo, target, make_args, hook_log):
    vimrc = repo.add_file("vim", ".vimrc")
    plugin = repo.add_file("vim", ".vim/plugin/x.vim")
    repo.add_logging_hook("vim", "pre-up", "10-pre.sh", hook_log)
    repo.add_logging_hook("vim", "post-up", "10-post.sh", hook_log)
    repo.add_logging_hook("vim", "pre-down", "10-down.sh", hook_log)

    assert make_service(make_args("vim")).install()

    assert (target / ".vimrc").readlink() == vimrc
    assert (target / ".vim").is_dir() and not (target / ".vim").is_symlink()
    assert (target / ".vim" / "plugin" / "x.vim").readlink() == plugin
    assert read_log(hook_log) == ["10-pre.sh", "10-post.sh"]


def test_install_scenario_tag_then_host(repo, target, make_args):
    repo.add_file("vim", ".vimrc", "global")
    work = repo.add_file("vim", ".vimrc", "work", tag="work")

    assert make_service(make_args("vim", tags=["work"])).install()
    assert (target / ".vimrc").readlink() == work


def test_pre_up_hook_sees_no_links_yet(repo, target, make_args, tmp_path):
    repo.add_file("vim", ".vimrc")
    marker = tmp_path / "seen"
    repo.add_hook("vim", "pre-up", "check.sh", f'[ -e "{target}/.vimrc" ] && touch "{marker}"\nexit 0')

    assert make_service(make_args("vim")).install()
    assert not marker.exists()


def test_install_is_idempotent(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    repo.add_file("vim", ".vim/colors/dark.vim", host=HOSTNAME)
    args = make_args("vim")

    assert make_service(args).install()
    inodes = {p: p.lstat().st_ino for p in target.rglob("*")}

    assert make_service(args).install()

    assert {p: p.lstat().st_ino for p in target.rglob("*")} == inodes
    plan = resolve(Package.from_repo(repo.root, "vim"), target, HOSTNAME, [])
    fs = FileSystem()
    assert all(
        fs.create_link(dest, src, test_mode=True) is LinkOutcome.UNCHANGED
        for dest, src in plan.mapping.items()
    )


def test_install_test_mode_is_pure(repo, target, make_args, hook_log):
    repo.add_file("vim", ".vimrc")
    repo.add_file("vim", "deep/dir/file")
    (target / "existing").write_text("x")
    repo.add_logging_hook("vim", "pre-up", "a.sh", hook_log)
    repo.add_logging_hook("vim", "post-up", "b.sh", hook_log)
    before = snapshot(target)

    assert make_service(make_args("vim", test=True)).install()

    assert snapshot(target) == before
    assert not hook_log.exists()


def test_install_test_mode_reports_conflicts(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    (target / ".vimrc").write_text("user")

    assert not make_service(make_args("vim", test=True)).install()
    assert (target / ".vimrc").read_text() == "user"


def test_pre_up_failure_aborts_package(repo, target, make_args, hook_log):
    repo.add_file("vim", ".vimrc")
    repo.add_hook("vim", "pre-up", "fail.sh", "exit 1")
    repo.add_logging_hook("vim", "post-up", "post.sh", hook_log)

    assert not make_service(make_args("vim")).install()

    assert not (target / ".vimrc").exists()
    assert not hook_log.exists()


def test_conflict_skips_post_up_but_links_others(repo, target, make_args, hook_log):
    repo.add_file("vim", ".vimrc")
    gvimrc = repo.add_file("vim", ".gvimrc")
    (target / ".vimrc").write_text("user")
    repo.add_logging_hook("vim", "post-up", "post.sh", hook_log)

    assert not make_service(make_args("vim")).install()

    assert (target / ".gvimrc").readlink() == gvimrc
    assert (target / ".vimrc").read_text() == "user"
    assert not hook_log.exists()


def test_force_install_replaces_conflict(repo, target, make_args):
    vimrc = repo.add_file("vim", ".vimrc")
    (target / ".vimrc").write_text("user")

    assert make_service(make_args("vim", force=True)).install()
    assert (target / ".vimrc").readlink() == vimrc


def test_directory_failure_aborts_package(repo, target, make_args, hook_log):
    repo.add_file("vim", ".vim/plugin/x.vim")
    (target / ".vim").write_text("not a directory")
    repo.add_logging_hook("vim", "post-up", "post.sh", hook_log)

    assert not make_service(make_args("vim")).install()
    assert not hook_log.exists()


def test_failed_package_does_not_stop_batch(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    repo.add_hook("vim", "pre-up", "fail.sh", "exit 1")
    zshrc = repo.add_file("zsh", ".zshrc")

    assert not make_service(make_args("vim", "zsh")).install()

    assert not (target / ".vimrc").exists()
    assert (target / ".zshrc").readlink() == zshrc


def test_missing_package_fails_but_continues(repo, target, make_args, caplog):
    zshrc = repo.add_file("zsh", ".zshrc")

    assert not make_service(make_args("nope", "zsh")).install()

    assert (target / ".zshrc").readlink() == zshrc
    assert "Package nope not found" in caplog.text


def test_declined_package_is_skipped_not_failed(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    zshrc = repo.add_file("zsh", ".zshrc")
    prompt = ScriptedPrompt(False, True)
    skipped = []

    ok = make_service(
        make_args("vim", "zsh", no_confirm=False), prompt, on_skip=skipped.append
    ).install()

    assert ok
    assert prompt.asked == 2
    assert skipped == ["vim"]
    assert not (target / ".vimrc").exists()
    assert (target / ".zshrc").readlink() == zshrc


def test_no_prompt_in_test_or_no_confirm_mode(repo, make_args):
    repo.add_file("vim", ".vimrc")
    prompt = ScriptedPrompt()

    assert make_service(make_args("vim", no_confirm=True), prompt).install()
    assert make_service(make_args("vim", no_confirm=False, test=True), prompt).install()
    assert prompt.asked == 0


def test_package_settings_select_target(repo, target, make_args, tmp_path):
    alt = tmp_path / "alt"
    alt.mkdir()
    vimrc = repo.add_file("vim", ".vimrc")
    repo.write_settings([str(alt)], package="vim")
    seen = []

    ok = make_service(
        make_args("vim"), on_package=lambda action, name, base, tgt: seen.append((action, name, tgt))
    ).install()

    assert ok
    assert (alt / ".vimrc").readlink() == vimrc
    assert not (target / ".vimrc").exists()
    assert seen == [("install", "vim", alt)]


def test_bad_package_settings_fail_only_that_package(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    (repo.root / "vim" / "settings.toml").write_text("not toml [")
    zshrc = repo.add_file("zsh", ".zshrc")

    assert not make_service(make_args("vim", "zsh")).install()
    assert (target / ".zshrc").readlink() == zshrc


def test_bad_repository_settings_abort_run(repo, make_args):
    repo.add_file("vim", ".vimrc")
    (repo.root / "settings.toml").write_text("not toml [")

    with pytest.raises(ConfigError):
        make_service(make_args("vim")).install()


def test_stage_callbacks(repo, make_args):
    repo.add_file("vim", ".vimrc")
    stages = []

    assert make_service(make_args("vim"), on_stage=stages.append).install()

    assert stages == [
        "Executing pre-up hooks",
        "Creating parent dirs where required",
        "Creating links",
        "Executing post-up hooks",
    ]


# ---------------------------------------------------------------------------
# uninstall
# ---------------------------------------------------------------------------


def test_uninstall_removes_links_and_runs_hooks(repo, target, make_args, hook_log):
    vimrc = repo.add_file("vim", ".vimrc")
    repo.add_file("vim", ".vim/plugin/x.vim")
    repo.add_logging_hook("vim", "pre-down", "pre.sh", hook_log)
    repo.add_logging_hook("vim", "post-down", "post.sh", hook_log)
    args = make_args("vim")
    assert make_service(args).install()

    assert make_service(args).uninstall()

    assert not (target / ".vimrc").exists()
    assert not (target / ".vim" / "plugin" / "x.vim").exists()
    assert (target / ".vim" / "plugin").is_dir()
    assert vimrc.exists()
    assert read_log(hook_log) == ["pre.sh", "post.sh"]


def test_uninstall_leaves_user_file(repo, target, make_args):
    """/home/u/.vimrc is a plain file the user created: refused without force."""
    repo.add_file("vim", ".vimrc")
    (target / ".vimrc").write_text("mine")

    assert make_service(make_args("vim")).uninstall()
    assert (target / ".vimrc").read_text() == "mine"


def test_uninstall_force_removes_user_file(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    (target / ".vimrc").write_text("mine")

    assert make_service(make_args("vim", force=True)).uninstall()
    assert not (target / ".vimrc").exists()


def test_uninstall_covers_all_tiers(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    repo.add_file("vim", ".gvimrc", tag="work")
    repo.add_file("vim", ".exrc", host=HOSTNAME)
    args = make_args("vim", tags=["work"])
    assert make_service(args).install()

    assert make_service(args).uninstall()

    assert list(target.iterdir()) == []


def test_uninstall_test_mode_is_pure(repo, target, make_args, hook_log):
    repo.add_file("vim", ".vimrc")
    repo.add_logging_hook("vim", "post-down", "post.sh", hook_log)
    assert make_service(make_args("vim")).install()
    before = snapshot(target)

    assert make_service(make_args("vim", test=True)).uninstall()

    assert snapshot(target) == before
    assert not hook_log.exists()


def test_uninstall_pre_down_failure_keeps_links(repo, target, make_args):
    repo.add_file("vim", ".vimrc")
    assert make_service(make_args("vim")).install()
    repo.add_hook("vim", "pre-down", "fail.sh", "exit 2")

    assert not make_service(make_args("vim")).uninstall()
    assert (target / ".vimrc").is_symlink()


def test_uninstall_removal_failure_skips_post_down(repo, target, make_args, hook_log, monkeypatch):
    from dotlayer.domain.package import filesystem as filesystem_module

    repo.add_file("vim", ".vimrc")
    repo.add_logging_hook("vim", "post-down", "post.sh", hook_log)
    assert make_service(make_args("vim")).install()

    def failing_remove(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(filesystem_module, "remove_entry", failing_remove)

    assert not make_service(make_args("vim")).uninstall()
    assert not hook_log.exists()


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


def test_add_moves_file_and_links_back(repo, target, make_args):
    original = target / ".config" / "app.conf"
    original.parent.mkdir()
    original.write_text("settings")

    assert make_service(make_args()).add("app", original)

    stored = repo.root / "app" / "files" / ".config" / "app.conf"
    assert stored.read_text() == "settings"
    assert original.readlink() == stored


def test_add_host_specific(repo, target, make_args):
    original = target / ".vimrc"
    original.write_text("x")

    assert make_service(make_args()).add("vim", original, host_specific=True)

    assert original.readlink() == repo.root / "vim" / "hosts" / HOSTNAME / "files" / ".vimrc"


def test_add_tag_specific(repo, target, make_args):
    original = target / ".vimrc"
    original.write_text("x")

    assert make_service(make_args()).add("vim", original, tag="work")

    assert original.readlink() == repo.root / "vim" / "tags" / "work" / "files" / ".vimrc"


def test_add_rejects_host_and_tag(repo, target, make_args):
    original = target / ".vimrc"
    original.write_text("x")

    with pytest.raises(ConfigError):
        make_service(make_args()).add("vim", original, host_specific=True, tag="work")


def test_add_outside_target_is_config_error(repo, make_args, tmp_path):
    outside = tmp_path / "outside.txt"
    outside.write_text("x")

    with pytest.raises(ConfigError, match="target directory"):
        make_service(make_args()).add("vim", outside)
    assert outside.read_text() == "x"


def test_add_missing_file(repo, target, make_args):
    with pytest.raises(PackageError):
        make_service(make_args()).add("vim", target / "nope")


def test_add_refuses_existing_repo_copy(repo, target, make_args):
    repo.add_file("vim", ".vimrc", "repo copy")
    original = target / ".vimrc"
    original.write_text("new")

    assert not make_service(make_args()).add("vim", original)

    assert original.read_text() == "new"
    assert (repo.root / "vim" / "files" / ".vimrc").read_text() == "repo copy"


def test_add_force_overwrites_repo_copy(repo, target, make_args):
    stored = repo.add_file("vim", ".vimrc", "repo copy")
    original = target / ".vimrc"
    original.write_text("new")

    assert make_service(make_args(force=True)).add("vim", original)

    assert stored.read_text() == "new"
    assert original.readlink() == stored


def test_add_test_mode_is_pure(repo, target, make_args):
    original = target / ".vimrc"
    original.write_text("x")
    before_target = snapshot(target)
    before_repo = snapshot(repo.root)

    assert make_service(make_args(test=True)).add("vim", original)

    assert snapshot(target) == before_target
    assert snapshot(repo.root) == before_repo


def test_add_declined_changes_nothing(repo, target, make_args):
    original = target / ".vimrc"
    original.write_text("x")

    assert make_service(make_args(no_confirm=False), ScriptedPrompt(False)).add("vim", original)

    assert not original.is_symlink()
    assert not (repo.root / "vim").exists()
