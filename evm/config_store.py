from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CURRENT = "current"
PATH = "path"
RECIPES_URL = "recipes_url"


class ConfigStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: Optional[str]) -> None:
        ...

    def items(self) -> Dict[str, str]:
        ...


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def load_config(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    try:
        if _detect_format(p) == "yaml":
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text) if text.strip() else {}
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"Unreadable config file {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping, got {type(data).__name__}: {p}")

    return data


def save_config(path: str | Path, data: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(data, sort_keys=True, default_flow_style=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")


class FileConfig:
    """Durable key/value record; every read goes back to disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        value = load_config(self.path).get(key)
        if value is None or value == "":
            return None
        return str(value)

    def set(self, key: str, value: Optional[str]) -> None:
        data = load_config(self.path)
        if value is None or value == "":
            data.pop(key, None)
        else:
            data[key] = str(value)
        save_config(self.path, data)
        logger.debug("config %s=%r (%s)", key, value, self.path)

    def items(self) -> Dict[str, str]:
        return {str(k): str(v) for k, v in load_config(self.path).items() if v not in (None, "")}


class MemoryConfig:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key) or None

    def set(self, key: str, value: Optional[str]) -> None:
        if value is None or value == "":
            self.data.pop(key, None)
        else:
            self.data[key] = value

    def items(self) -> Dict[str, str]:
        return dict(self.data)
