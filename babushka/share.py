"""
Share links: a unit encoded as URL-safe base64 JSON in the ``deck`` query
parameter.
"""

import base64
import binascii
import json
import logging
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import SHARE_QUERY_PARAM
from .exceptions import ShareDecodeError
from .models import FlashCard, Unit

logger = logging.getLogger(__name__)


class SharedUnit(BaseModel):
    """The portable part of a unit: everything but its local id."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1)
    cards: List[FlashCard] = Field(..., min_length=1)
    icon: Optional[str] = None


def encode_unit(unit: Unit) -> str:
    """Encode a unit's name, cards and icon as a URL-safe token."""
    payload = {"name": unit.name, "cards": [card.to_wire() for card in unit.cards]}
    if unit.icon is not None:
        payload["icon"] = unit.icon
    raw = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_payload(token: str) -> SharedUnit:
    """
    Decode a share token produced by ``encode_unit``.

    Both the URL-safe and the standard base64 alphabets are accepted, with or
    without padding.

    Raises:
        ShareDecodeError: If the token is not base64, not UTF-8 JSON, or does
            not describe a unit with a string name and a list of cards.
    """
    # A '+' that went through form decoding arrives as a space.
    cleaned = (
        token.strip()
        .replace(" ", "-")
        .replace("+", "-")
        .replace("/", "_")
        .rstrip("=")
    )
    if not cleaned:
        raise ShareDecodeError("Share payload is empty.")
    padded = cleaned + "=" * (-len(cleaned) % 4)
    try:
        raw = base64.b64decode(
            padded.encode("ascii"), altchars=b"-_", validate=True
        ).decode("utf-8")
        data = json.loads(raw)
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ShareDecodeError(
            f"Share payload could not be decoded: {e}", original_exception=e
        ) from e

    if not isinstance(data, dict):
        raise ShareDecodeError("Share payload must be a JSON object.")
    if not isinstance(data.get("name"), str):
        raise ShareDecodeError("Share payload 'name' must be a string.")
    if not isinstance(data.get("cards"), list):
        raise ShareDecodeError("Share payload 'cards' must be a list.")

    try:
        return SharedUnit.model_validate(data)
    except ValidationError as e:
        raise ShareDecodeError(
            f"Share payload is malformed: {e}", original_exception=e
        ) from e


def build_share_url(base_url: str, unit: Unit) -> str:
    """Append the encoded unit to ``base_url`` as the ``deck`` parameter."""
    parts = urlsplit(base_url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query = [(k, v) for k, v in query if k != SHARE_QUERY_PARAM]
    query.append((SHARE_QUERY_PARAM, encode_unit(unit)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def extract_share_payload(url: str) -> Tuple[Optional[str], str]:
    """
    Pull the share token out of a URL.

    Returns:
        tuple: ``(token, cleaned_url)`` where ``token`` is None if the URL
        carries no share parameter and ``cleaned_url`` is the URL with the
        parameter removed.
    """
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    token = None
    remaining = []
    for key, value in query:
        if key == SHARE_QUERY_PARAM and token is None:
            token = value
        elif key != SHARE_QUERY_PARAM:
            remaining.append((key, value))
    cleaned = urlunsplit(parts._replace(query=urlencode(remaining)))
    return token, cleaned
