"""Forwarding scripts placed on PATH that exec a package's binary."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from .errors import ShimError

logger = logging.getLogger(__name__)

SHIM_MODE = 0o755

# Inside bash double quotes these are still expanded or end the string.
UNSAFE_TARGET_CHARS = frozenset('"$`\\')

_EXEC_LINE = re.compile(r'^exec "(?P<target>.+)" "\$@"$')


def check_shim_target(target: str | Path) -> None:
    bad = sorted(UNSAFE_TARGET_CHARS.intersection(str(target)))
    if bad:
        raise ShimError(f"Cannot forward to {target}: path contains {' '.join(bad)}")


def shim_content(target: str | Path) -> str:
    check_shim_target(target)
    return f'#!/bin/bash\nexec "{target}" "$@"\n'


def shim_occupied(path: str | Path) -> bool:
    # lexists: a dangling symlink still occupies the path.
    return os.path.lexists(path)


def write_shim(path: str | Path, target: str | Path) -> None:
    p = Path(path)
    content = shim_content(target)
    with p.open("w", encoding="utf-8") as f:
        f.write(content)
    p.chmod(SHIM_MODE)
    logger.debug("Wrote shim %s -> %s", p, target)


def remove_shim(path: str | Path) -> bool:
    if not shim_occupied(path):
        return False
    os.remove(path)
    logger.debug("Removed shim %s", path)
    return True


def read_shim_target(path: str | Path) -> Optional[Path]:
    """Return the binary a shim forwards to, or None if it is not our shim."""
    p = Path(path)
    if p.is_symlink() or not p.is_file():
        return None
    try:
        lines = p.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return None
    if len(lines) != 2 or lines[0] != "#!/bin/bash":
        return None
    m = _EXEC_LINE.match(lines[1])
    if not m:
        return None
    return Path(m.group("target"))
