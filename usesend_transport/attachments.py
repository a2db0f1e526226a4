"""Attachment normalization.

Every supported attachment shape ends up as a filename plus standard base64
content, which is the only form the emails endpoint accepts:

* ``raw``: string, bytes, stream, or a nested ``{path}``/``{content}`` object
* ``path``: ``data:`` URI, ``http(s)://`` URL, ``file://`` URL or local path
* ``content``: bytes-like, stream (file-like ``read()`` or chunk iterator),
  or string with an optional ``encoding``

The first source present in that order wins; the others are ignored. Each
source kind is a small frozen dataclass with one resolver registered in
``_RESOLVERS``.

Streams are drained fully into memory before encoding.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import AttachmentError, MissingAttachmentContentError
from .models import Attachment, NormalizedAttachment
from .utils import (
    DEFAULT_FILENAME,
    b64decode_lenient,
    b64encode_str,
    encode_string,
    filename_from_content_type,
    last_segment,
)

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0
STREAM_CHUNK_SIZE = 64 * 1024

_DATA_URI = re.compile(r"^data:([^;]+)?(?:;base64)?,(.*)$", re.DOTALL)
_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")
_BYTES_LIKE = (bytes, bytearray, memoryview)


@dataclass(frozen=True)
class RawSource:
    value: Any


@dataclass(frozen=True)
class DataUriSource:
    uri: str


@dataclass(frozen=True)
class UrlSource:
    url: str


@dataclass(frozen=True)
class FileSource:
    path: str


@dataclass(frozen=True)
class BytesSource:
    data: bytes


@dataclass(frozen=True)
class StreamSource:
    stream: Any


@dataclass(frozen=True)
class TextSource:
    text: str
    encoding: Optional[str] = None


@dataclass(frozen=True)
class ResolveContext:
    label: str
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT


Resolved = tuple[bytes, Optional[str]]


def normalize_attachment(
    attachment: Attachment | Mapping[str, Any],
    *,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> NormalizedAttachment:
    """Resolve one attachment to ``NormalizedAttachment``.

    May read files, drain streams or issue an HTTP GET. Raises
    ``AttachmentError`` (or ``MissingAttachmentContentError``) on failure.
    """
    if isinstance(attachment, Mapping):
        attachment = Attachment.from_mapping(attachment)
    elif not isinstance(attachment, Attachment):
        raise AttachmentError(
            f"Unsupported attachment type: {type(attachment).__name__}",
            hint="Pass an Attachment or a mapping with filename/content/path/raw keys.",
        )

    context = ResolveContext(label=attachment.filename or "unnamed", fetch_timeout=fetch_timeout)
    source = classify_source(attachment, context)
    content, derived_filename = _RESOLVERS[type(source)](source, context)

    filename = (
        attachment.filename
        or derived_filename
        or filename_from_content_type(attachment.content_type)
        or DEFAULT_FILENAME
    )
    logger.debug(
        "Resolved attachment '%s' from %s (%d bytes)",
        filename,
        type(source).__name__,
        len(content),
    )
    return NormalizedAttachment(filename=filename, content=b64encode_str(content))


def classify_source(attachment: Attachment, context: ResolveContext):
    """Pick the single content source used for ``attachment``."""
    if attachment.raw is not None:
        return RawSource(attachment.raw)
    if attachment.path:
        return _classify_path(attachment.path, context)
    if attachment.content is not None:
        return _classify_content(attachment.content, attachment.encoding, context)
    raise MissingAttachmentContentError(attachment.filename)


def _classify_path(path: Any, context: ResolveContext):
    if isinstance(path, os.PathLike):
        return FileSource(os.fspath(path))
    if not isinstance(path, str):
        raise AttachmentError(
            f"Unsupported path type: {type(path).__name__}", filename=context.label
        )
    if path.startswith("data:"):
        return DataUriSource(path)
    if path.startswith(("http://", "https://")):
        return UrlSource(path)
    if path.startswith("file://"):
        return FileSource(path[len("file://"):])
    return FileSource(path)


def _classify_content(content: Any, encoding: Optional[str], context: ResolveContext):
    if isinstance(content, _BYTES_LIKE):
        return BytesSource(bytes(content))
    if is_stream(content):
        return StreamSource(content)
    if isinstance(content, str):
        return TextSource(content, encoding)
    raise AttachmentError(
        f"Unsupported content type: {type(content).__name__}",
        filename=context.label,
        hint="Use str, bytes, a file-like object or an iterator of chunks.",
    )


def is_stream(value: Any) -> bool:
    """File-like objects with ``read()`` and chunk iterators count as streams."""
    if isinstance(value, (str, *_BYTES_LIKE)):
        return False
    return callable(getattr(value, "read", None)) or isinstance(value, Iterator)


def drain_stream(stream: Any, label: str = "unnamed") -> bytes:
    """Read every chunk of ``stream`` in order and concatenate them."""
    chunks: list[bytes] = []
    try:
        if callable(getattr(stream, "read", None)):
            while True:
                chunk = stream.read(STREAM_CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(_chunk_to_bytes(chunk))
        else:
            for chunk in stream:
                chunks.append(_chunk_to_bytes(chunk))
    except Exception as exc:
        raise AttachmentError(f"Failed to read stream: {exc}", filename=label) from exc
    return b"".join(chunks)


def _chunk_to_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, _BYTES_LIKE):
        return bytes(chunk)
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    raise TypeError(f"stream yielded {type(chunk).__name__}, expected bytes or str")


def _resolve_raw(source: RawSource, context: ResolveContext) -> Resolved:
    value = source.value
    if isinstance(value, _BYTES_LIKE):
        return bytes(value), None
    if isinstance(value, str):
        return value.encode("utf-8"), None
    if is_stream(value):
        return drain_stream(value, context.label), None

    if isinstance(value, Mapping):
        value = Attachment.from_mapping(value)
    if isinstance(value, Attachment):
        if value.path:
            nested = _classify_path(value.path, context)
            content, _ = _RESOLVERS[type(nested)](nested, context)
            return content, None
        if value.content is not None:
            nested = _classify_content(value.content, value.encoding, context)
            content, _ = _RESOLVERS[type(nested)](nested, context)
            return content, None

    raise AttachmentError("Unsupported raw content type", filename=context.label)


def _resolve_data_uri(source: DataUriSource, context: ResolveContext) -> Resolved:
    match = _DATA_URI.match(source.uri)
    if not match:
        raise AttachmentError(
            "Invalid data URI format: malformed data URI.",
            filename=context.label,
            hint="Expected data:[<mime type>][;base64],<data>.",
        )

    mime_type, data = match.groups()
    if ";base64," in source.uri:
        content = b64decode_lenient(data)
    else:
        if _BAD_PERCENT.search(data):
            raise AttachmentError(
                "Invalid data URI format: malformed percent-encoding.",
                filename=context.label,
            )
        try:
            content = unquote(data, errors="strict").encode("utf-8")
        except UnicodeDecodeError as exc:
            raise AttachmentError(
                f"Invalid data URI format: {exc}", filename=context.label
            ) from exc

    return content, filename_from_content_type(mime_type)


def _resolve_url(source: UrlSource, context: ResolveContext) -> Resolved:
    url = source.url
    try:
        response = requests.get(url, timeout=context.fetch_timeout)
    except requests.RequestException as exc:
        raise AttachmentError(
            f'Failed to fetch attachment from URL "{url}": {exc}', filename=context.label
        ) from exc

    if not 200 <= response.status_code < 300:
        raise AttachmentError(
            f'Failed to fetch attachment from URL "{url}": '
            f"HTTP {response.status_code}: {response.reason}",
            filename=context.label,
        )

    segment = last_segment(urlparse(url).path)
    return response.content, unquote(segment) if segment else None


def _resolve_file(source: FileSource, context: ResolveContext) -> Resolved:
    file_path = Path(source.path)
    try:
        content = file_path.read_bytes()
    except (OSError, ValueError) as exc:
        cause = getattr(exc, "strerror", None) or str(exc)
        raise AttachmentError(
            f'Failed to read attachment from file "{source.path}": {cause}',
            filename=context.label,
        ) from exc
    return content, file_path.name or None


def _resolve_bytes(source: BytesSource, context: ResolveContext) -> Resolved:
    return source.data, None


def _resolve_stream(source: StreamSource, context: ResolveContext) -> Resolved:
    return drain_stream(source.stream, context.label), None


def _resolve_text(source: TextSource, context: ResolveContext) -> Resolved:
    try:
        return encode_string(source.text, source.encoding), None
    except (ValueError, LookupError) as exc:
        raise AttachmentError(
            f"Failed to decode string content with encoding {source.encoding!r}: {exc}",
            filename=context.label,
        ) from exc


_RESOLVERS: dict[type, Callable[[Any, ResolveContext], Resolved]] = {
    RawSource: _resolve_raw,
    DataUriSource: _resolve_data_uri,
    UrlSource: _resolve_url,
    FileSource: _resolve_file,
    BytesSource: _resolve_bytes,
    StreamSource: _resolve_stream,
    TextSource: _resolve_text,
}
