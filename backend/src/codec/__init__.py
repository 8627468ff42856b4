from .digest import payload_digest
from .errors import DecodingError, EncodingError, PayloadError, ValidationError
from .normalize import create_default_payload, normalize_payload, normalize_retrieval
from .token import (
    FRAGMENT_KEY,
    build_share_url,
    canonical_json,
    decode_payload,
    encode_payload,
    extract_token,
    parse_payload_from_fragment,
    payload_to_fragment,
    payload_to_pretty_json,
)

__all__ = [
    "PayloadError",
    "ValidationError",
    "EncodingError",
    "DecodingError",
    "normalize_payload",
    "normalize_retrieval",
    "create_default_payload",
    "canonical_json",
    "encode_payload",
    "decode_payload",
    "extract_token",
    "payload_to_fragment",
    "payload_to_pretty_json",
    "build_share_url",
    "parse_payload_from_fragment",
    "payload_digest",
    "FRAGMENT_KEY",
]
