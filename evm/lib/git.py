from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


class Git:
    """Shallow checkout of a repository at a fixed path.

    Used for the recipe repository and for recipes built from git sources.
    """

    def __init__(self, path: str | Path, *, dry_run: bool = False) -> None:
        self.path = Path(path)
        self.dry_run = dry_run

    def exists(self) -> bool:
        return self.path.exists()

    def clone(self, url: str, *, branch: Optional[str] = None) -> CmdResult:
        args = ["clone"]
        if branch:
            args += ["--branch", branch]
        return self._git(*args, url, str(self.path))

    def pull(self) -> CmdResult:
        return self._git("pull", cwd=str(self.path))

    def _git(self, *args: str, cwd: Optional[str] = None) -> CmdResult:
        return run_cmd(["git", *args, "--depth=1"], cwd=cwd, dry_run=self.dry_run)
