"""Data layer utilities for locating and loading story modules."""

from .errors import DataError, DataLoadError, DataValidationError
from .story_loader import DEFAULT_STORY, list_bundled_stories, load_story

__all__ = [
    "DEFAULT_STORY",
    "DataError",
    "DataLoadError",
    "DataValidationError",
    "list_bundled_stories",
    "load_story",
]
