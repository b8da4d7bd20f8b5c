"""
The topic archive: categories of topics a user can pick to generate a unit.
"""

import logging
from functools import lru_cache
from importlib import resources
from typing import List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

LIBRARY_RESOURCE = "library.yaml"


class LibraryCategory(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    category: str = Field(..., min_length=1)
    icon: str
    topics: Tuple[str, ...] = Field(..., min_length=1)

    def matches(self, term: str) -> bool:
        """Case-insensitive match on the category name or any topic."""
        needle = term.lower()
        return needle in self.category.lower() or any(
            needle in topic.lower() for topic in self.topics
        )


class _RawLibraryFile(BaseModel):
    categories: List[LibraryCategory]


@lru_cache(maxsize=1)
def load_library() -> Tuple[LibraryCategory, ...]:
    source = resources.files("babushka.data").joinpath(LIBRARY_RESOURCE)
    raw = yaml.safe_load(source.read_text(encoding="utf-8"))
    categories = tuple(_RawLibraryFile.model_validate(raw).categories)
    logger.debug(f"Loaded {len(categories)} library categories.")
    return categories


def search_library(term: Optional[str] = None) -> List[LibraryCategory]:
    """Return the categories matching ``term``; all of them when blank."""
    categories = load_library()
    if not term or not term.strip():
        return list(categories)
    return [cat for cat in categories if cat.matches(term.strip())]


def find_topic(topic: str) -> Optional[LibraryCategory]:
    """Return the category listing ``topic`` exactly (case-insensitive)."""
    wanted = topic.strip().lower()
    for cat in load_library():
        if any(t.lower() == wanted for t in cat.topics):
            return cat
    return None
