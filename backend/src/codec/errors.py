class PayloadError(ValueError):
    """Base class for payload codec failures."""


class ValidationError(PayloadError):
    """Payload is not an object or carries an unsupported version."""


class EncodingError(PayloadError):
    """Payload could not be compressed into a token."""


class DecodingError(PayloadError):
    """Token could not be decompressed or parsed."""
