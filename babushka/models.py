"""
Pydantic models for flashcards, units and the study session snapshot.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FlashCard(BaseModel):
    """
    A single vocabulary card. Immutable once created.

    The persisted and shared JSON form uses the short keys ``f``, ``t``,
    ``p`` and ``c``; the long field names are accepted as well.
    """

    model_config = ConfigDict(
        frozen=True, extra="ignore", populate_by_name=True
    )

    front: str = Field(
        ...,
        alias="f",
        min_length=1,
        description="Russian word or phrase shown on the front.",
    )
    translation: str = Field(
        ...,
        alias="t",
        min_length=1,
        description="English translation.",
    )
    phonetic: str = Field(
        default="",
        alias="p",
        description="Phonetic transcription.",
    )
    context: str = Field(
        default="",
        alias="c",
        description="Example sentence or cultural note.",
    )

    @field_validator("front", "translation")
    @classmethod
    def reject_blank_text(cls, v: str) -> str:
        """Reject text fields that are only whitespace."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    def to_wire(self) -> dict:
        """Short-key dict used for persistence and share payloads."""
        return self.model_dump(by_alias=True)


class Unit(BaseModel):
    """
    A named, ordered collection of flashcards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Unique unit id.")
    name: str = Field(..., min_length=1, description="Display name.")
    icon: Optional[str] = Field(
        default=None, description="Optional emoji shown next to the name."
    )
    cards: List[FlashCard] = Field(..., min_length=1)

    def to_wire(self) -> dict:
        """Persisted form: ``{id, name, icon?, cards}`` with short card keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Session(BaseModel):
    """
    Snapshot of the study position within the active unit.

    Every transition returns a new snapshot; the working cards are a copy of
    the unit's cards and may be reordered without touching the unit.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    active_unit_id: str
    working_cards: Tuple[FlashCard, ...] = ()
    index: int = Field(default=0, ge=0)
    flipped: bool = False

    @model_validator(mode="after")
    def check_index_in_bounds(self) -> "Session":
        """Index must point at a card, or be 0 for an empty unit."""
        size = len(self.working_cards)
        if size == 0 and self.index != 0:
            raise ValueError("index must be 0 when there are no cards")
        if size and self.index >= size:
            raise ValueError(
                f"index {self.index} out of range for {size} cards"
            )
        return self

    @classmethod
    def start(cls, unit_id: str, cards: Sequence[FlashCard]) -> "Session":
        """Begin at the first card of a unit, front side up."""
        return cls(active_unit_id=unit_id, working_cards=tuple(cards))

    def select_unit(
        self, unit_id: str, cards: Sequence[FlashCard]
    ) -> "Session":
        return Session.start(unit_id, cards)

    @property
    def size(self) -> int:
        return len(self.working_cards)

    @property
    def current_card(self) -> Optional[FlashCard]:
        if not self.working_cards:
            return None
        return self.working_cards[self.index]

    @property
    def position_label(self) -> str:
        if not self.working_cards:
            return "0 / 0"
        return f"{self.index + 1} / {self.size}"

    def toggle_flip(self) -> "Session":
        return self.model_copy(update={"flipped": not self.flipped})

    def unflip(self) -> "Session":
        if not self.flipped:
            return self
        return self.model_copy(update={"flipped": False})

    def next(self) -> "Session":
        """Move forward one card, wrapping at the end."""
        if self.size <= 1:
            return self
        return self.model_copy(
            update={"index": (self.index + 1) % self.size, "flipped": False}
        )

    def previous(self) -> "Session":
        """Move back one card, wrapping at the start."""
        if self.size <= 1:
            return self
        return self.model_copy(
            update={"index": (self.index - 1) % self.size, "flipped": False}
        )

    def shuffle(self, rng: Optional[random.Random] = None) -> "Session":
        """
        Reorder the working cards with an unbiased Fisher-Yates shuffle and
        return to the first card, front side up.
        """
        cards = list(self.working_cards)
        (rng or random).shuffle(cards)
        return self.model_copy(
            update={
                "working_cards": tuple(cards),
                "index": 0,
                "flipped": False,
            }
        )
