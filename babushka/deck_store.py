"""
The deck store merges the read-only starter units with user-created units
and keeps the user-created ones in durable storage.
"""

import json
import logging
import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .constants import (
    CUSTOM_ID_PREFIX,
    CUSTOM_UNIT_NUMBER_START,
    DEFAULT_CUSTOM_ICON,
    STORAGE_KEY_CUSTOM,
)
from .db.storage import StoragePort
from .exceptions import BuiltinUnitError, StorageParseError
from .models import FlashCard, Unit
from .parser import BuiltinCatalog, load_builtin_units

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class DeckStore:
    """
    Addressable mapping of unit id to unit.

    Built-in units come first, in bundled order, followed by custom units
    ordered by id. Every mutation is written to storage before returning.
    """

    def __init__(
        self,
        storage: StoragePort,
        builtins: Optional[BuiltinCatalog] = None,
        clock: Callable[[], int] = _epoch_ms,
    ):
        """
        Create the store and rehydrate custom units from storage.

        Parameters:
            storage (StoragePort): Durable key/value storage.
            builtins (Optional[BuiltinCatalog]): Starter units; the bundled
                ones are loaded when omitted.
            clock (Callable[[], int]): Millisecond timestamp source for ids.
        """
        self._storage = storage
        self._builtins = builtins or load_builtin_units()
        self._clock = clock
        self._custom: Dict[str, Unit] = self._rehydrate()

    # --- Persistence ---

    def _rehydrate(self) -> Dict[str, Unit]:
        raw = self._storage.get(STORAGE_KEY_CUSTOM)
        if raw is None:
            return {}
        try:
            units = self._parse_saved_units(raw)
        except StorageParseError as e:
            logger.error(f"Failed to load saved units, starting empty: {e}")
            return {}
        logger.info(f"Loaded {len(units)} custom units from storage.")
        return units

    def _parse_saved_units(self, raw: str) -> Dict[str, Unit]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageParseError(
                f"Saved units are not valid JSON: {e}", original_exception=e
            ) from e
        if not isinstance(data, dict):
            raise StorageParseError(
                "Saved units must be a JSON object keyed by unit id."
            )

        units: Dict[str, Unit] = {}
        for unit_id, entry in data.items():
            if unit_id in self._builtins.units:
                logger.warning(
                    f"Ignoring saved unit '{unit_id}' that shadows a built-in unit."
                )
                continue
            if not isinstance(entry, dict):
                logger.warning(f"Skipping saved unit '{unit_id}': not an object.")
                continue
            try:
                units[unit_id] = Unit.model_validate({**entry, "id": unit_id})
            except ValidationError as e:
                logger.warning(f"Skipping invalid saved unit '{unit_id}': {e}")
        return units

    def _commit(self, custom: Dict[str, Unit]) -> None:
        """Write ``custom`` to storage and only then adopt it in memory."""
        payload = {unit_id: unit.to_wire() for unit_id, unit in custom.items()}
        self._storage.set(
            STORAGE_KEY_CUSTOM, json.dumps(payload, ensure_ascii=False)
        )
        self._custom = custom

    # --- Queries ---

    @property
    def builtin_ids(self) -> List[str]:
        return list(self._builtins.units)

    def _sorted_custom_ids(self) -> List[str]:
        return sorted(self._custom)

    def is_builtin(self, unit_id: str) -> bool:
        return unit_id in self._builtins.units

    def is_custom(self, unit_id: str) -> bool:
        return unit_id in self._custom

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        if unit_id in self._builtins.units:
            return self._builtins.units[unit_id]
        return self._custom.get(unit_id)

    def get_cards(self, unit_id: str) -> List[FlashCard]:
        """Cards of a unit in stored order; empty for an unknown id."""
        unit = self.get_unit(unit_id)
        return list(unit.cards) if unit else []

    def custom_units(self) -> List[Unit]:
        return [self._custom[uid] for uid in self._sorted_custom_ids()]

    def label(self, unit_id: str) -> str:
        """Display label, e.g. ``Unit 12: 📂 Space``."""
        if unit_id in self._builtins.labels:
            return self._builtins.labels[unit_id]
        unit = self._custom.get(unit_id)
        if unit is None:
            return unit_id
        number = CUSTOM_UNIT_NUMBER_START + self._sorted_custom_ids().index(
            unit_id
        )
        return f"Unit {number}: {unit.icon or DEFAULT_CUSTOM_ICON} {unit.name}"

    def list_units(self) -> List[Tuple[str, str]]:
        """All units as ``(id, label)`` pairs in display order."""
        ids = self.builtin_ids + self._sorted_custom_ids()
        return [(unit_id, self.label(unit_id)) for unit_id in ids]

    # --- Mutations ---

    def _new_id(self, prefix: str) -> str:
        base = f"{prefix}_{self._clock()}"
        candidate, suffix = base, 0
        while candidate in self._custom or candidate in self._builtins.units:
            suffix += 1
            candidate = f"{base}_{suffix}"
        return candidate

    def add_unit(
        self,
        name: str,
        cards: Sequence[FlashCard],
        icon: Optional[str] = None,
        prefix: str = CUSTOM_ID_PREFIX,
    ) -> str:
        """
        Create a custom unit and persist it.

        Returns:
            str: The new unit id.

        Raises:
            ValueError: If the unit has no cards or a blank name.
            StorageError: If the write fails; the store is left unchanged.
        """
        if not cards:
            raise ValueError("A unit needs at least one card.")
        unit = Unit(
            id=self._new_id(prefix),
            name=name.strip(),
            icon=icon,
            cards=list(cards),
        )
        self._commit({**self._custom, unit.id: unit})
        logger.info(
            f"Added unit '{unit.id}' ({unit.name}) with {len(unit.cards)} cards."
        )
        return unit.id

    def delete_unit(self, unit_id: str) -> bool:
        """
        Remove a custom unit.

        Returns:
            bool: True if removed, False if the id is unknown.

        Raises:
            BuiltinUnitError: If the id names a built-in unit.
            StorageError: If the write fails; the unit is kept.
        """
        if unit_id in self._builtins.units:
            raise BuiltinUnitError(f"Built-in unit '{unit_id}' cannot be deleted.")
        if unit_id not in self._custom:
            logger.warning(f"Delete requested for unknown unit '{unit_id}'.")
            return False
        self._commit(
            {uid: unit for uid, unit in self._custom.items() if uid != unit_id}
        )
        logger.info(f"Deleted unit '{unit_id}'.")
        return True
