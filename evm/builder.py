from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional, Protocol

from .errors import BuildError, CommandError
from .lib.command import run_cmd
from .lib.git import Git
from .lib.osdetect import HostPlatform, Platform
from .recipes import Recipe

logger = logging.getLogger(__name__)

APP_BUNDLE = "Emacs.app"


class SupportsBuild(Protocol):
    def build(self) -> None:
        ...


BuilderFactory = Callable[[Recipe, Path, Path], SupportsBuild]


class Builder:
    """Fetch, configure, compile and install one recipe into install_path."""

    def __init__(
        self,
        recipe: Recipe,
        install_path: str | Path,
        tmp_path: str | Path,
        *,
        platform: Optional[Platform] = None,
        dry_run: bool = False,
    ) -> None:
        self.recipe = recipe
        self.install_path = Path(install_path)
        self.tmp_path = Path(tmp_path)
        self.platform = platform or HostPlatform()
        self.dry_run = dry_run

    @property
    def build_path(self) -> Path:
        return self.tmp_path / self.recipe.name

    @property
    def tarball_path(self) -> Path:
        return self.tmp_path / f"{self.recipe.name}.tar.gz"

    def build(self) -> None:
        logger.info("Building %s into %s", self.recipe.name, self.install_path)
        try:
            self._fetch()
            self._autogen()
            self._configure()
            self._make("all")
            self._make("install")
        except CommandError as e:
            raise BuildError(f"Failed to build {self.recipe.name}: {e}", recipe=self.recipe.name) from e
        self._copy_app_bundle()
        logger.info("Built %s", self.recipe.name)

    def _run(self, argv: list[str]) -> None:
        run_cmd(argv, cwd=str(self.build_path), dry_run=self.dry_run)

    def _fetch(self) -> None:
        if self.build_path.exists() and not self.dry_run:
            logger.info("Removing previous build tree %s", self.build_path)
            shutil.rmtree(self.build_path)

        if self.recipe.git:
            Git(self.build_path, dry_run=self.dry_run).clone(self.recipe.git, branch=self.recipe.ref)
            return

        run_cmd(
            ["curl", "-fsSL", "-o", str(self.tarball_path), str(self.recipe.tar_gz)],
            dry_run=self.dry_run,
        )
        if not self.dry_run:
            self.build_path.mkdir()
        run_cmd(
            ["tar", "-xzf", str(self.tarball_path), "-C", str(self.build_path), "--strip-components=1"],
            dry_run=self.dry_run,
        )

    def _autogen(self) -> None:
        if (self.build_path / "configure").exists():
            return
        if (self.build_path / "autogen.sh").exists():
            self._run(["./autogen.sh"])

    def _configure(self) -> None:
        opts = self.recipe.configure_options(
            macos=self.platform.is_macos(),
            linux=self.platform.is_linux(),
        )
        self._run(["./configure", f"--prefix={self.install_path}", *opts])

    def _make(self, target: str) -> None:
        self._run(["make", target])

    def _copy_app_bundle(self) -> None:
        # NS builds leave the bundle in the build tree; make install does not copy it.
        if not self.platform.is_macos():
            return
        bundle = self.build_path / "nextstep" / APP_BUNDLE
        if not bundle.is_dir():
            return
        dest = self.install_path / APP_BUNDLE
        if self.dry_run:
            logger.info("Would copy %s -> %s", bundle, dest)
            return
        logger.info("Copying %s -> %s", bundle, dest)
        shutil.copytree(bundle, dest, symlinks=True, dirs_exist_ok=True)
