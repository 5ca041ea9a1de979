from __future__ import annotations

import os
from pathlib import Path

import pytest

from conftest import make_binary
from evm.lib.command import CmdResult
from evm.main import main
from evm.package import Package


def test_list_marks_installed_and_current(ctx, capsys: pytest.CaptureFixture[str]) -> None:
    make_binary(Package("bar", ctx).bin)
    ctx.config.set("current", "bar")

    assert main(["list"], ctx=ctx) == 0

    assert capsys.readouterr().out.splitlines() == ["  foo", "* bar [I]"]


def test_install_with_use(ctx, builds, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["install", "foo", "--use"], ctx=ctx) == 0

    assert len(builds.calls) == 1
    assert Package.current(ctx).name == "foo"
    assert os.access(ctx.settings.managed_emacs_path, os.X_OK)
    assert "Installed foo" in capsys.readouterr().out


def test_install_creates_missing_installation_dir(ctx, builds, tmp_path: Path) -> None:
    ctx.config.set("path", str(tmp_path / "deep" / "evm"))

    assert main(["install", "foo"], ctx=ctx) == 0

    assert Package("foo", ctx).is_installed()


def test_install_already_installed(ctx, builds, capsys: pytest.CaptureFixture[str]) -> None:
    make_binary(Package("foo", ctx).bin)

    assert main(["install", "foo"], ctx=ctx) == 1
    assert "already installed" in capsys.readouterr().err
    assert builds.calls == []

    assert main(["install", "foo", "--skip"], ctx=ctx) == 0
    assert builds.calls == []

    assert main(["install", "foo", "--force"], ctx=ctx) == 0
    assert len(builds.calls) == 1


def test_unknown_package(ctx, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["use", "baz"], ctx=ctx) == 1

    assert "No such package: baz" in capsys.readouterr().err


def test_use_requires_installed_package(ctx, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["use", "foo"], ctx=ctx) == 1

    assert "foo is not installed" in capsys.readouterr().err
    assert not os.path.lexists(ctx.settings.managed_emacs_path)


def test_use_and_disuse(ctx) -> None:
    make_binary(Package("foo", ctx).bin)

    assert main(["use", "foo"], ctx=ctx) == 0
    assert ctx.config.get("current") == "foo"

    assert main(["disuse"], ctx=ctx) == 0
    assert main(["disuse"], ctx=ctx) == 0
    assert ctx.config.get("current") is None
    assert not os.path.lexists(ctx.settings.emacs_path)


def test_uninstall(ctx) -> None:
    pkg = Package("foo", ctx)
    make_binary(pkg.bin)

    assert main(["uninstall", "foo"], ctx=ctx) == 0
    assert not pkg.path.exists()

    assert main(["uninstall", "foo"], ctx=ctx) == 1


def test_bin(ctx, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bin"], ctx=ctx) == 1

    ctx.config.set("current", "foo")
    assert main(["bin"], ctx=ctx) == 0
    assert main(["bin", "bar"], ctx=ctx) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == [str(Package("foo", ctx).bin), str(Package("bar", ctx).bin)]


def test_config_get_set(ctx, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    assert main(["config", "path", str(tmp_path / "evm")], ctx=ctx) == 0
    assert main(["config", "path"], ctx=ctx) == 0
    assert main(["config", "current", "foo"], ctx=ctx) == 1
    assert main(["config"], ctx=ctx) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == [str(tmp_path / "evm"), f"path: {tmp_path / 'evm'}"]
    assert ctx.config.get("current") is None


def test_update_without_repository_url(ctx, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["update"], ctx=ctx) == 1

    assert "No recipe repository configured" in capsys.readouterr().err


def test_update_clones_then_pulls(ctx, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list = []

    def fake_run_cmd(argv, *, cwd=None, dry_run=False, **kwargs) -> CmdResult:
        calls.append(list(argv))
        if argv[1] == "clone":
            Path(argv[3]).mkdir()
        return CmdResult(argv=list(argv), returncode=0, stdout="", stderr="")

    monkeypatch.setattr("evm.lib.git.run_cmd", fake_run_cmd)
    ctx.config.set("recipes_url", "https://example.invalid/recipes.git")

    assert main(["update"], ctx=ctx) == 0
    assert main(["update"], ctx=ctx) == 0

    assert [c[1] for c in calls] == ["clone", "pull"]


def test_status(ctx, capsys: pytest.CaptureFixture[str]) -> None:
    foo = Package("foo", ctx)
    bar = Package("bar", ctx)
    make_binary(foo.bin)
    make_binary(bar.bin)
    foo.use()

    assert main(["status"], ctx=ctx) == 0
    bar.use()
    assert main(["status"], ctx=ctx) == 1

    out = capsys.readouterr().out
    assert "current: bar" in out
    assert "WARNING:" in out


def test_dry_run_install_on_fresh_home_changes_nothing(
    ctx, builds, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    builds.produce_binary = False
    installations = tmp_path / "fresh" / "evm"
    ctx.config.set("path", str(installations))

    assert main(["--dry-run", "install", "foo"], ctx=ctx) == 0

    assert not installations.exists()
    assert len(builds.calls) == 1
    assert "Would install foo" in capsys.readouterr().out


def test_dry_run_install_with_use_does_not_activate(ctx, builds) -> None:
    builds.produce_binary = False

    assert main(["--dry-run", "install", "foo", "--use"], ctx=ctx) == 0

    assert ctx.config.get("current") is None
    assert not os.path.lexists(ctx.settings.emacs_path)
    assert not os.path.lexists(ctx.settings.managed_emacs_path)
    assert not Package("foo", ctx).path.exists()


def test_dry_run_force_reinstall_keeps_existing_install(ctx, builds) -> None:
    pkg = Package("foo", ctx)
    make_binary(pkg.bin)
    builds.produce_binary = False

    assert main(["--dry-run", "install", "foo", "--force"], ctx=ctx) == 0

    assert pkg.is_installed()


def test_install_with_use_refuses_when_build_left_no_binary(
    ctx, builds, capsys: pytest.CaptureFixture[str]
) -> None:
    builds.produce_binary = False

    assert main(["install", "foo", "--use"], ctx=ctx) == 1

    assert "not activating" in capsys.readouterr().err
    assert ctx.config.get("current") is None
    assert not os.path.lexists(ctx.settings.managed_emacs_path)


def test_filesystem_error_is_reported(
    ctx, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def unwritable(path, target) -> None:
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr("evm.package.write_shim", unwritable)
    make_binary(Package("foo", ctx).bin)

    assert main(["use", "foo"], ctx=ctx) == 1

    assert "ERROR:" in capsys.readouterr().err
    assert ctx.config.get("current") is None


def test_config_path_rejects_characters_a_shim_cannot_quote(
    ctx, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["config", "path", "/tmp/$x/evm"], ctx=ctx) == 1

    assert "cannot appear in a shim" in capsys.readouterr().err
    assert ctx.config.get("path") is None
