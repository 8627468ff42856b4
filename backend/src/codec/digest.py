import hashlib
from typing import Any

from .token import canonical_json


def payload_digest(payload: Any) -> str:
    """Compute an MD5 hex digest of the canonical JSON for change detection.

    Payloads that normalize identically share a digest. Not a security
    boundary: it only keys stored sessions and skips redundant rebuilds.
    """
    hasher = hashlib.md5()
    hasher.update(canonical_json(payload).encode("utf-8", "surrogatepass"))
    return hasher.hexdigest()
