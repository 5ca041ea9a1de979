from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import yaml

from .errors import RecipeError

logger = logging.getLogger(__name__)

BUNDLED_RECIPES = Path(__file__).resolve().parent / "data" / "recipes"


@dataclass(frozen=True)
class Recipe:
    name: str
    tar_gz: Optional[str] = None
    git: Optional[str] = None
    ref: Optional[str] = None
    configure: Tuple[str, ...] = ()
    osx: Tuple[str, ...] = ()
    linux: Tuple[str, ...] = ()
    source_path: Optional[Path] = field(default=None, compare=False)

    def configure_options(self, *, macos: bool, linux: bool) -> List[str]:
        opts = list(self.configure)
        if macos:
            opts.extend(self.osx)
        if linux:
            opts.extend(self.linux)
        return opts


class RecipeCatalog(Protocol):
    def find(self, name: str) -> Optional[Recipe]:
        ...

    def all(self) -> List[Recipe]:
        ...


def _options(raw: Any, *, where: str) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, list) and all(isinstance(o, str) for o in raw):
        return tuple(raw)
    raise RecipeError(f"{where} must be a string or a list of strings")


def parse_recipe(raw: Dict[str, Any], *, source_path: Optional[Path] = None) -> Recipe:
    """Validate one recipe mapping.

    Recognized keys:
      name: emacs-29.4
      source: {tar_gz: <url>} or {git: <url>, ref: <branch/tag>}
      configure: [--with-modules, ...]
      osx: {configure: [...]}
      linux: {configure: [...]}
    """

    where = str(source_path) if source_path else "recipe"
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise RecipeError(f"{where}: missing recipe name")

    source = raw.get("source") or {}
    if not isinstance(source, dict):
        raise RecipeError(f"{where}: source must be a mapping")
    tar_gz = source.get("tar_gz")
    git = source.get("git")
    if bool(tar_gz) == bool(git):
        raise RecipeError(f"{where}: source needs exactly one of tar_gz or git")

    def _platform(key: str) -> Tuple[str, ...]:
        section = raw.get(key) or {}
        if not isinstance(section, dict):
            raise RecipeError(f"{where}: {key} must be a mapping")
        return _options(section.get("configure"), where=f"{where}: {key}.configure")

    return Recipe(
        name=name,
        tar_gz=tar_gz,
        git=git,
        ref=source.get("ref"),
        configure=_options(raw.get("configure"), where=f"{where}: configure"),
        osx=_platform("osx"),
        linux=_platform("linux"),
        source_path=source_path,
    )


def load_recipe(path: str | Path) -> Recipe:
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise RecipeError(f"{p}: invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise RecipeError(f"{p}: recipe must contain a mapping")
    return parse_recipe(raw, source_path=p)


class DirectoryCatalog:
    """Recipes read from one or more directories of YAML files.

    Directories are read in order, so a recipe in a later directory replaces
    a bundled one with the same name. Missing directories are skipped.
    """

    def __init__(self, *dirs: str | Path) -> None:
        self.dirs = [Path(d) for d in dirs]

    def _load(self) -> Dict[str, Recipe]:
        recipes: Dict[str, Recipe] = {}
        for d in self.dirs:
            if not d.is_dir():
                logger.debug("Recipe directory missing: %s", d)
                continue
            for p in sorted(d.iterdir()):
                if p.suffix.lower() not in {".yml", ".yaml"} or not p.is_file():
                    continue
                recipe = load_recipe(p)
                recipes[recipe.name] = recipe
        return recipes

    def find(self, name: str) -> Optional[Recipe]:
        return self._load().get(name)

    def all(self) -> List[Recipe]:
        return [r for _, r in sorted(self._load().items())]


class MemoryCatalog:
    def __init__(self, recipes: Iterable[Recipe] = ()) -> None:
        self.recipes: List[Recipe] = list(recipes)

    @classmethod
    def of(cls, names: Sequence[str]) -> "MemoryCatalog":
        return cls(Recipe(name=n, tar_gz=f"https://example.invalid/{n}.tar.gz") for n in names)

    def find(self, name: str) -> Optional[Recipe]:
        for r in self.recipes:
            if r.name == name:
                return r
        return None

    def all(self) -> List[Recipe]:
        return list(self.recipes)
