"""Shared test fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from evm.config_store import MemoryConfig
from evm.context import Evm
from evm.env import Settings
from evm.lib.osdetect import StaticPlatform
from evm.recipes import MemoryCatalog, Recipe


def make_binary(path: Path, *, executable: bool = True) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    path.chmod(0o755 if executable else 0o644)
    return path


@dataclass
class FakeBuilds:
    """Builder factory that records calls and optionally lays down a binary."""

    calls: List[Tuple[str, Path, Path]] = field(default_factory=list)
    produce_binary: bool = True
    error: Optional[Exception] = None

    def __call__(self, recipe: Recipe, install_path: Path, tmp_path: Path) -> "FakeBuilder":
        return FakeBuilder(self, recipe, install_path, tmp_path)


@dataclass
class FakeBuilder:
    owner: FakeBuilds
    recipe: Recipe
    install_path: Path
    tmp_path: Path

    def build(self) -> None:
        self.owner.calls.append((self.recipe.name, self.install_path, self.tmp_path))
        if self.owner.error is not None:
            raise self.owner.error
        if self.owner.produce_binary:
            make_binary(self.install_path / "bin" / "emacs")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    home = tmp_path / "home"
    home.mkdir()
    bindir = tmp_path / "bin"
    bindir.mkdir()
    return Settings(home=home, emacs_path=bindir / "emacs", managed_emacs_path=bindir / "evm-emacs")


@pytest.fixture
def builds() -> FakeBuilds:
    return FakeBuilds()


@pytest.fixture
def config() -> MemoryConfig:
    return MemoryConfig()


@pytest.fixture
def make_ctx(settings: Settings, config: MemoryConfig, builds: FakeBuilds):
    def _make(system: str = "Linux", names: Tuple[str, ...] = ("foo", "bar")) -> Evm:
        settings.default_installations_path.mkdir(exist_ok=True)
        return Evm(
            settings=settings,
            config=config,
            catalog=MemoryCatalog.of(names),
            platform=StaticPlatform(system),
            builder_factory=builds,
        )

    return _make


@pytest.fixture
def ctx(make_ctx) -> Evm:
    return make_ctx()
