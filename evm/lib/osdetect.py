from __future__ import annotations

import platform
from typing import Protocol


class Platform(Protocol):
    def is_macos(self) -> bool:
        ...

    def is_linux(self) -> bool:
        ...


class HostPlatform:
    """Answers from the running interpreter's host."""

    def is_macos(self) -> bool:
        return platform.system() == "Darwin"

    def is_linux(self) -> bool:
        return platform.system() == "Linux"


class StaticPlatform:
    """Fixed answer, for tests and for planning builds for another host."""

    def __init__(self, system: str) -> None:
        self.system = system

    def is_macos(self) -> bool:
        return self.system == "Darwin"

    def is_linux(self) -> bool:
        return self.system == "Linux"

    def __repr__(self) -> str:
        return f"StaticPlatform({self.system!r})"
