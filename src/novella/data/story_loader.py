"""Helpers for importing stories authored as Python modules."""
from __future__ import annotations

import importlib
import importlib.util
import pkgutil
from pathlib import Path
from types import ModuleType
from typing import List

from novella.domain.defs import StoryDef

from .errors import DataLoadError, DataValidationError

STORIES_PACKAGE = "novella.stories"
DEFAULT_STORY = f"{STORIES_PACKAGE}.simple_story"


def list_bundled_stories() -> List[str]:
    """Return the dotted module names of the stories shipped with the package."""
    package = importlib.import_module(STORIES_PACKAGE)
    return sorted(
        f"{STORIES_PACKAGE}.{info.name}"
        for info in pkgutil.iter_modules(package.__path__)
        if not info.ispkg
    )


def load_story(source: str | Path, attribute: str = "story") -> StoryDef:
    """Import ``source`` (a dotted module name or a ``.py`` path) and return its story.

    Raises DataLoadError when the module cannot be imported and
    DataValidationError when it has no StoryDef under ``attribute``.
    """
    module = _import_story_module(source)
    story = getattr(module, attribute, None)
    if story is None:
        raise DataValidationError(f"Story module {module.__name__} has no '{attribute}' attribute.")
    if not isinstance(story, StoryDef):
        raise DataValidationError(
            f"{module.__name__}.{attribute} must be a StoryDef, got {type(story).__name__}."
        )
    return story


def _import_story_module(source: str | Path) -> ModuleType:
    path = Path(source)
    if isinstance(source, Path) or path.suffix == ".py":
        return _import_from_path(path)
    try:
        return importlib.import_module(str(source))
    except ModuleNotFoundError as exc:
        raise DataLoadError(f"Story module not found: {source}") from exc
    except (ImportError, SyntaxError) as exc:
        raise DataLoadError(f"Unable to import story module {source}: {exc}") from exc


def _import_from_path(path: Path) -> ModuleType:
    if not path.is_file():
        raise DataLoadError(f"Story file not found: {path}")
    module_name = f"novella_story_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise DataLoadError(f"Unable to load story file: {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except (ImportError, SyntaxError) as exc:
        raise DataLoadError(f"Unable to import story file {path}: {exc}") from exc
    return module
