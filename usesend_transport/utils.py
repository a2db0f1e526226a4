"""Utility helpers shared across modules."""

from __future__ import annotations

import base64
import codecs
import re

DEFAULT_FILENAME = "attachment.bin"

# Mail-library encoding names that Python spells differently.
_ENCODING_ALIASES = {
    "utf8": "utf-8",
    "binary": "latin-1",
    "latin1": "latin-1",
    "ucs2": "utf-16-le",
    "ucs-2": "utf-16-le",
    "utf16le": "utf-16-le",
    "utf-16le": "utf-16-le",
}

_BASE64_JUNK = re.compile(r"[^A-Za-z0-9+/]")


def b64encode_str(payload: bytes) -> str:
    """Standard base64, no line wrapping; empty input gives ``""``."""
    return base64.b64encode(payload).decode("ascii")


def b64decode_lenient(value: str) -> bytes:
    """Decode base64 the forgiving way mail libraries do.

    Accepts the URL-safe alphabet, embedded whitespace and missing padding.
    Decoding stops at the first ``=``.
    """
    data = value.split("=", 1)[0].replace("-", "+").replace("_", "/")
    data = _BASE64_JUNK.sub("", data)
    remainder = len(data) % 4
    if remainder == 1:
        # A lone trailing sextet carries no full byte.
        data = data[:-1]
    elif remainder:
        data += "=" * (4 - remainder)
    return base64.b64decode(data)


def encode_string(content: str, encoding: str | None) -> bytes:
    """Turn a string into bytes, interpreting it in ``encoding`` when given.

    ``base64``/``base64url``/``hex`` decode the string; any text encoding
    encodes it. Raises ``ValueError`` or ``LookupError`` on bad input.
    """
    if not encoding:
        return content.encode("utf-8")

    name = encoding.strip().lower()
    if name in ("base64", "base64url"):
        return b64decode_lenient(content)
    if name == "hex":
        try:
            return bytes.fromhex(content)
        except ValueError as exc:
            raise ValueError(f"invalid hex string: {exc}") from exc
    codec = codecs.lookup(_ENCODING_ALIASES.get(name, name))
    return content.encode(codec.name)


def filename_from_content_type(content_type: str | None) -> str | None:
    """``image/png`` -> ``attachment.png``; ``None`` when there is no type."""
    if not content_type:
        return None
    parts = content_type.split("/")
    subtype = parts[1].split(";", 1)[0].strip() if len(parts) > 1 else ""
    return f"attachment.{subtype or 'bin'}"


def last_segment(path: str) -> str | None:
    """Final ``/``-separated segment, or ``None`` when it is empty."""
    segment = path.rsplit("/", 1)[-1]
    return segment or None
