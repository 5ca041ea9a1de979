"""Read-only consistency report for the activation state.

Activation touches three things that can drift apart: the primary shim, the
managed shim and the persisted ``current`` key. This module only reports the
drift; it never rewrites anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config_store import CURRENT
from .context import Evm
from .package import Package
from .shims import read_shim_target, shim_occupied

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShimState:
    path: Path
    present: bool
    target: Optional[Path]

    @property
    def foreign(self) -> bool:
        """Present but not a shim evm wrote (user binary, symlink, ...)."""
        return self.present and self.target is None


@dataclass(frozen=True)
class ActivationReport:
    current: Optional[str]
    current_installed: bool
    primary: ShimState
    managed: ShimState
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def _shim_state(path: Path) -> ShimState:
    present = shim_occupied(path)
    return ShimState(path=path, present=present, target=read_shim_target(path) if present else None)


def inspect_activation(ctx: Evm) -> ActivationReport:
    primary = _shim_state(ctx.settings.emacs_path)
    managed = _shim_state(ctx.settings.managed_emacs_path)
    issues: List[str] = []

    current_name = ctx.config.get(CURRENT)
    current_installed = False

    if current_name is None:
        if managed.present:
            issues.append(f"{managed.path} exists but no package is current")
        if primary.present and not primary.foreign:
            issues.append(f"{primary.path} exists but no package is current")
    elif ctx.catalog.find(current_name) is None:
        issues.append(f"current package {current_name} has no recipe")
    else:
        pkg = Package(current_name, ctx)
        current_installed = pkg.is_installed()
        expected = pkg.bin
        if not current_installed:
            issues.append(f"current package {current_name} is not installed")
        if not managed.present:
            issues.append(f"{managed.path} is missing")
        elif managed.target != expected:
            issues.append(f"{managed.path} does not forward to {expected}")
        if primary.present and not primary.foreign and primary.target != expected:
            issues.append(f"{primary.path} forwards to {primary.target}, not {expected}")

    for issue in issues:
        logger.warning("Inconsistent activation: %s", issue)

    return ActivationReport(
        current=current_name,
        current_installed=current_installed,
        primary=primary,
        managed=managed,
        issues=issues,
    )
