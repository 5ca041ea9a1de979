from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_HOME = "~/.evm"
DEFAULT_EMACS_PATH = "/usr/local/bin/emacs"
DEFAULT_MANAGED_EMACS_PATH = "/usr/local/bin/evm-emacs"


@dataclass(frozen=True)
class Settings:
    home: Path
    emacs_path: Path
    managed_emacs_path: Path
    recipes_url: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            home=Path(env.get("EVM_HOME") or DEFAULT_HOME).expanduser(),
            emacs_path=Path(env.get("EVM_EMACS_PATH") or DEFAULT_EMACS_PATH).expanduser(),
            managed_emacs_path=Path(env.get("EVM_MANAGED_EMACS_PATH") or DEFAULT_MANAGED_EMACS_PATH).expanduser(),
            recipes_url=env.get("EVM_RECIPES_URL") or None,
        )

    @property
    def config_path(self) -> Path:
        return self.home / "config.yml"

    @property
    def recipes_path(self) -> Path:
        return self.home / "recipes"

    @property
    def log_path(self) -> Path:
        return self.home / "evm.log"

    @property
    def default_installations_path(self) -> Path:
        return self.home / "installations"
