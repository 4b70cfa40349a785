"""
Signature capture: validation of drawn or uploaded signature images.

Signatures travel as ``data:image/...;base64,...`` URLs. Past validation
the payload is opaque; it is stored and rendered as-is.
"""

import base64
import binascii
import re

ALLOWED_SIGNATURE_TYPES = ("image/png", "image/jpeg", "image/svg+xml")
MAX_SIGNATURE_BYTES = 2 * 1024 * 1024

_DATA_URL = re.compile(
    r"^data:(?P<mime>image/(?:png|jpeg|jpg|svg\+xml));base64,(?P<data>[A-Za-z0-9+/=\s]*)$",
    re.IGNORECASE,
)


class SignatureError(ValueError):
    """Raised for signature payloads that cannot be stored"""


def _data_url(mime: str, raw: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def _check_size(raw: bytes) -> None:
    if not raw:
        raise SignatureError("Signature image is empty")
    if len(raw) > MAX_SIGNATURE_BYTES:
        raise SignatureError("Signature image exceeds 2 MB")


def normalize_signature(payload: str) -> str:
    """
    Validate a signature data URL and return it in canonical form.

    Canonical form has a lowercase MIME type (``image/jpg`` becomes
    ``image/jpeg``), no whitespace and padded base64.

    Raises:
        SignatureError: wrong scheme or type, bad base64, empty or oversized image
    """
    if not isinstance(payload, str):
        raise SignatureError("Signature must be a data URL string")

    match = _DATA_URL.match(payload.strip())
    if not match:
        raise SignatureError("Signature must be a base64 PNG, JPEG or SVG data URL")

    mime = match.group("mime").lower()
    if mime == "image/jpg":
        mime = "image/jpeg"

    encoded = re.sub(r"\s+", "", match.group("data"))
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SignatureError("Signature data is not valid base64") from e

    _check_size(raw)
    return _data_url(mime, raw)


def signature_from_upload(content: bytes, content_type: str) -> str:
    """Turn an uploaded signature image into the stored data URL form"""
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime == "image/jpg":
        mime = "image/jpeg"
    if mime not in ALLOWED_SIGNATURE_TYPES:
        raise SignatureError("Signature upload must be a PNG, JPEG or SVG image")
    _check_size(content)
    return _data_url(mime, content)
