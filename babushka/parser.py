"""
Loading of unit definitions from YAML/JSON files: the bundled starter units
and user-supplied card files for manual unit creation.
"""

import logging
from importlib import resources
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import CardFileError
from .models import FlashCard, Unit

logger = logging.getLogger(__name__)

BUILTIN_UNITS_RESOURCE = "builtin_units.yaml"

# Card text like `Yes`, `No` or `1` must stay a string.
_TEXT_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
}


class CardTextLoader(yaml.SafeLoader):
    """SafeLoader that resolves unquoted scalars only to strings or null."""


CardTextLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TEXT_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class _RawBuiltinUnit(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    icon: Optional[str] = None
    cards: List[FlashCard] = Field(..., min_length=1)


class _RawBuiltinFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    units: List[_RawBuiltinUnit] = Field(..., min_length=1)


class _RawCardFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    icon: Optional[str] = None
    cards: List[FlashCard] = Field(..., min_length=1)


class BuiltinCatalog(NamedTuple):
    """Starter units keyed by id (in bundled order) and their labels."""

    units: Dict[str, Unit]
    labels: Dict[str, str]


class CardFile(NamedTuple):
    name: Optional[str]
    icon: Optional[str]
    cards: List[FlashCard]


def _first_error(e: ValidationError) -> str:
    error_details = e.errors()[0]
    field = ".".join(map(str, error_details["loc"]))
    return f"Validation error in field '{field}': {error_details['msg']}"


def load_builtin_units(path: Optional[Path] = None) -> BuiltinCatalog:
    """
    Load the starter units shipped with the package.

    A malformed bundle is a packaging bug, so errors propagate.

    Parameters:
        path (Optional[Path]): Alternative YAML file, used by tests.

    Returns:
        BuiltinCatalog: Units and labels keyed by unit id, in file order.

    Raises:
        CardFileError: If the file is missing, not YAML, or fails validation.
    """
    if path is None:
        source = resources.files("babushka.data").joinpath(
            BUILTIN_UNITS_RESOURCE
        )
        file_label: Union[str, Path] = BUILTIN_UNITS_RESOURCE
    else:
        source = path
        file_label = path

    try:
        raw = yaml.load(
            source.read_text(encoding="utf-8"), Loader=CardTextLoader
        )
        parsed = _RawBuiltinFile.model_validate(raw)
    except (OSError, yaml.YAMLError) as e:
        raise CardFileError(file_label, f"Could not load: {e}", e) from e
    except ValidationError as e:
        raise CardFileError(file_label, _first_error(e), e) from e

    units: Dict[str, Unit] = {}
    labels: Dict[str, str] = {}
    for raw_unit in parsed.units:
        if raw_unit.id in units:
            raise CardFileError(
                file_label, f"Duplicate unit id '{raw_unit.id}'."
            )
        units[raw_unit.id] = Unit(
            id=raw_unit.id,
            name=raw_unit.name,
            icon=raw_unit.icon,
            cards=raw_unit.cards,
        )
        labels[raw_unit.id] = raw_unit.label

    logger.debug(f"Loaded {len(units)} built-in units from {file_label}.")
    return BuiltinCatalog(units=units, labels=labels)


def load_cards_file(file_path: Path) -> CardFile:
    """
    Read a YAML or JSON card file for manual unit creation.

    The file holds either a bare list of cards or a mapping with ``cards``
    and optional ``name``/``icon``. Cards use the short keys ``f``, ``t``,
    ``p``, ``c`` or the long field names.

    Raises:
        CardFileError: If the file cannot be read or its content is invalid.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
        raw = yaml.load(content, Loader=CardTextLoader)
    except FileNotFoundError:
        raise CardFileError(file_path, "File not found.") from None
    except OSError as e:
        raise CardFileError(file_path, f"Could not read file: {e}", e) from e
    except yaml.YAMLError as e:
        raise CardFileError(file_path, f"Invalid YAML syntax: {e}", e) from e

    if isinstance(raw, list):
        raw = {"cards": raw}
    if not isinstance(raw, dict):
        raise CardFileError(
            file_path,
            "Top level must be a list of cards or a mapping with 'cards'.",
        )

    try:
        parsed = _RawCardFile.model_validate(raw)
    except ValidationError as e:
        raise CardFileError(file_path, _first_error(e), e) from e

    logger.info(f"Read {len(parsed.cards)} cards from {file_path}.")
    return CardFile(name=parsed.name, icon=parsed.icon, cards=parsed.cards)
