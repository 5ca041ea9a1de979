from __future__ import annotations

from typing import Optional, Sequence


class EvmError(Exception):
    """Base class for errors reported to the user."""


class PackageNotFoundError(EvmError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No such package: {name}")
        self.name = name


class RecipeError(EvmError):
    pass


class ConfigError(EvmError):
    pass


class CommandError(EvmError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr:
            msg += f"\n{stderr}"
        super().__init__(msg)


class BuildError(EvmError):
    def __init__(self, message: str, *, recipe: Optional[str] = None) -> None:
        super().__init__(message)
        self.recipe = recipe


class ShimError(EvmError):
    pass
