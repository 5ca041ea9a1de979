from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .builder import Builder, BuilderFactory
from .config_store import PATH, ConfigStore, FileConfig
from .env import Settings
from .lib.osdetect import HostPlatform, Platform
from .recipes import BUNDLED_RECIPES, DirectoryCatalog, RecipeCatalog


@dataclass(frozen=True)
class Evm:
    """Everything a lifecycle operation talks to besides the filesystem."""

    settings: Settings
    config: ConfigStore
    catalog: RecipeCatalog
    platform: Platform
    builder_factory: BuilderFactory

    @classmethod
    def default(cls, settings: Optional[Settings] = None, *, dry_run: bool = False) -> "Evm":
        settings = settings or Settings.from_env()
        platform = HostPlatform()

        def builder_factory(recipe, install_path: Path, tmp_path: Path) -> Builder:
            return Builder(recipe, install_path, tmp_path, platform=platform, dry_run=dry_run)

        return cls(
            settings=settings,
            config=FileConfig(settings.config_path),
            catalog=DirectoryCatalog(BUNDLED_RECIPES, settings.recipes_path),
            platform=platform,
            builder_factory=builder_factory,
        )

    @property
    def installations_path(self) -> Path:
        configured = self.config.get(PATH)
        if configured:
            return Path(configured).expanduser()
        return self.settings.default_installations_path

    @property
    def tmp_path(self) -> Path:
        return self.installations_path / "tmp"
