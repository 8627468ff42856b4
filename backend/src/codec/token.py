"""Shareable tokens: canonical JSON compressed into a URL-safe string."""

import json
import logging
from typing import Any, Optional
from urllib.parse import parse_qs

from lzstring import LZString

from models.payload import Payload
from .errors import DecodingError, EncodingError
from .normalize import normalize_payload

logger = logging.getLogger(__name__)

FRAGMENT_KEY = "r"

_lz = LZString()


def _to_code_units(text: str) -> str:
    """Spell ``text`` as UTF-16 code units, one character per unit.

    Browser lz-string compresses code units, so characters above U+FFFF
    are written as surrogate pairs before compression.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    return "".join(
        chr(int.from_bytes(data[i : i + 2], "little")) for i in range(0, len(data), 2)
    )


def _from_code_units(units: str) -> str:
    """Join surrogate pairs produced by ``_to_code_units`` back into characters."""
    return units.encode("utf-16-le", "surrogatepass").decode("utf-16-le")


def canonical_json(payload: Any) -> str:
    """Serialize the normalized form of ``payload`` as compact JSON."""
    normalized = normalize_payload(payload)
    return json.dumps(
        normalized.to_canonical_dict(), ensure_ascii=False, separators=(",", ":")
    )


def payload_to_pretty_json(payload: Any) -> str:
    return json.dumps(
        normalize_payload(payload).to_canonical_dict(), ensure_ascii=False, indent=2
    )


def encode_payload(payload: Any) -> str:
    """Normalize ``payload`` and compress it into a URL-safe token.

    Raises:
        ValidationError: If the payload cannot be normalized.
        EncodingError: If compression yields an empty token.
    """
    encoded = _lz.compressToEncodedURIComponent(
        _to_code_units(canonical_json(payload))
    )
    if not encoded:
        logger.warning("Compression produced an empty token")
        raise EncodingError("Failed to encode payload.")
    return encoded


def decode_payload(token: str) -> Payload:
    """Decompress, parse and normalize a token produced by ``encode_payload``.

    Raises:
        DecodingError: If the token does not decompress to JSON.
        ValidationError: If the JSON is not a supported payload.
    """
    try:
        # Query-string parsing turns "+" into a space.
        decoded = (
            _lz.decompressFromEncodedURIComponent(token.replace(" ", "+"))
            if token
            else None
        )
    except Exception as e:
        logger.warning(f"Failed to decompress token: {e}")
        raise DecodingError("Invalid encoded payload.") from e
    if not decoded:
        raise DecodingError("Invalid encoded payload.")

    try:
        decoded = _from_code_units(decoded)
    except UnicodeError as e:
        logger.warning(f"Decompressed token has unpaired surrogates: {e}")
        raise DecodingError("Invalid encoded payload.") from e

    try:
        parsed = json.loads(decoded)
    except json.JSONDecodeError as e:
        logger.warning(f"Decompressed token is not JSON: {e}")
        raise DecodingError(f"Encoded payload is not valid JSON: {e}") from e

    return normalize_payload(parsed)


def extract_token(fragment: str) -> Optional[str]:
    """Pull the encoded payload out of a URL, a fragment or a bare token.

    ``https://host/#r=TOKEN``, ``#r=TOKEN`` and ``r=TOKEN`` yield ``TOKEN``.
    A fragment without the ``r`` key is returned whole, which is how older
    links were written. Returns None when there is nothing to decode.
    """
    if "#" in fragment:
        fragment = fragment.split("#", 1)[1]
    fragment = fragment.strip()
    if not fragment:
        return None

    params = parse_qs(fragment, keep_blank_values=True)
    if FRAGMENT_KEY in params:
        return params[FRAGMENT_KEY][0] or None
    return fragment


def payload_to_fragment(payload: Any) -> str:
    return f"#{FRAGMENT_KEY}={encode_payload(payload)}"


def build_share_url(payload: Any, base_url: str = "") -> str:
    """Return ``base_url`` with the payload embedded in its fragment."""
    base = base_url.split("#", 1)[0]
    return f"{base}{payload_to_fragment(payload)}"


def parse_payload_from_fragment(fragment: str) -> Optional[Payload]:
    """Decode the payload embedded in ``fragment``.

    Returns None for an empty fragment. Codec errors propagate.
    """
    token = extract_token(fragment)
    if token is None:
        return None
    return decode_payload(token)
