"""Package lifecycle: absent, installed, active.

State is never cached here. Every query looks at the installation directory,
the two shim paths and the persisted ``current`` key, which together are the
only record of what is installed and what is active.

There is no locking. Two evm processes working on the same installation
directory or shims at the same time can interleave their filesystem effects
(for example two concurrent ``use`` calls can leave the managed shim pointing
at one package while ``current`` names the other). evm assumes one
interactive user running one command at a time.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional

from .builder import APP_BUNDLE
from .config_store import CURRENT
from .context import Evm
from .errors import PackageNotFoundError
from .lib.osdetect import Platform
from .recipes import Recipe
from .shims import check_shim_target, remove_shim, shim_occupied, write_shim

logger = logging.getLogger(__name__)

BINARY_NAME = "emacs"
BUNDLE_EXECUTABLE = "Emacs"


def deactivate(ctx: Evm) -> None:
    """Remove both shims and clear the current package. Safe to repeat."""

    if remove_shim(ctx.settings.emacs_path):
        logger.info("Removed %s", ctx.settings.emacs_path)
    if remove_shim(ctx.settings.managed_emacs_path):
        logger.info("Removed %s", ctx.settings.managed_emacs_path)
    ctx.config.set(CURRENT, None)


class Package:
    def __init__(self, name: str, ctx: Evm) -> None:
        self._name = name
        self.ctx = ctx
        self._os: Optional[Platform] = None

    @property
    def name(self) -> str:
        return self._name

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"Package({self._name!r})"

    @classmethod
    def find(cls, name: str, ctx: Evm) -> "Package":
        if ctx.catalog.find(name) is None:
            raise PackageNotFoundError(name)
        return cls(name, ctx)

    @classmethod
    def all(cls, ctx: Evm) -> List["Package"]:
        return [cls(recipe.name, ctx) for recipe in ctx.catalog.all()]

    @classmethod
    def current(cls, ctx: Evm) -> Optional["Package"]:
        name = ctx.config.get(CURRENT)
        if not name:
            return None
        return cls.find(name, ctx)

    @property
    def recipe(self) -> Recipe:
        recipe = self.ctx.catalog.find(self._name)
        if recipe is None:
            raise PackageNotFoundError(self._name)
        return recipe

    @property
    def platform(self) -> Platform:
        if self._os is None:
            self._os = self.ctx.platform
        return self._os

    # -- state queries -----------------------------------------------------

    @property
    def path(self) -> Path:
        return self.ctx.installations_path / self._name

    @property
    def bin(self) -> Path:
        if self.platform.is_macos():
            bundle = self.path / APP_BUNDLE
            if bundle.exists():
                return bundle / "Contents" / "MacOS" / BUNDLE_EXECUTABLE
        return self.path / "bin" / BINARY_NAME

    def is_installed(self) -> bool:
        binary = self.bin
        return binary.is_file() and os.access(binary, os.X_OK)

    def is_current(self) -> bool:
        current = Package.current(self.ctx)
        return current is not None and current.name == self._name

    # -- transitions -------------------------------------------------------

    def install(self) -> None:
        logger.info("Installing %s", self._name)
        if not self.path.exists():
            self.path.mkdir()
        tmp_path = self.ctx.tmp_path
        if not tmp_path.exists():
            tmp_path.mkdir()

        builder = self.ctx.builder_factory(self.recipe, self.path, tmp_path)
        builder.build()
        logger.info("Installed %s", self._name)

    def uninstall(self) -> None:
        was_current = self.is_current()

        if self.path.is_symlink() or (self.path.exists() and not self.path.is_dir()):
            logger.info("Removing %s", self.path)
            os.unlink(self.path)
        elif self.path.exists():
            logger.info("Removing %s", self.path)
            shutil.rmtree(self.path)
        else:
            logger.info("%s is not installed; nothing to remove", self._name)

        # The primary shim may belong to the user; only the managed one goes.
        if was_current and remove_shim(self.ctx.settings.managed_emacs_path):
            logger.info("Removed %s", self.ctx.settings.managed_emacs_path)

    def use(self) -> None:
        settings = self.ctx.settings
        target = self.bin
        check_shim_target(target)

        if shim_occupied(settings.emacs_path):
            # Never refreshed once present, so it may still forward to an
            # earlier package; the managed shim and `current` are authoritative.
            logger.info("Leaving existing %s untouched", settings.emacs_path)
        else:
            write_shim(settings.emacs_path, target)

        remove_shim(settings.managed_emacs_path)
        write_shim(settings.managed_emacs_path, target)

        self.ctx.config.set(CURRENT, self._name)
        logger.info("Activated %s (%s)", self._name, target)

    def disuse(self) -> None:
        deactivate(self.ctx)
        logger.info("Deactivated %s", self._name)
