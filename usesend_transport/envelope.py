"""Turn a caller's mail description into a validated ``SendRequest``."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from html import unescape
from typing import Any, Mapping, Sequence

from .addresses import ADDRESS_HINT, parse_address, parse_address_list
from .attachments import DEFAULT_FETCH_TIMEOUT, normalize_attachment
from .errors import ValidationError
from .models import MailMessage, NormalizedAttachment, SendRequest

logger = logging.getLogger(__name__)

MAX_ATTACHMENTS = 10
EMPTY_TEXT_FALLBACK = "Content not available."

_HIDDEN_BLOCKS = re.compile(r"<(script|style|head)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_LINE_BREAKS = re.compile(r"<br\s*/?>|</(p|div|h[1-6]|li|tr|table|blockquote)\s*>", re.IGNORECASE)
_TAGS = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")


def html_to_text(html: str) -> str:
    """Best-effort plain text for an HTML body.

    Strips tags and collapses whitespace; never returns an empty string for a
    non-empty ``html``.
    """
    text = _HIDDEN_BLOCKS.sub("", html)
    text = _LINE_BREAKS.sub("\n", text)
    text = unescape(_TAGS.sub("", text))
    text = _SPACES.sub(" ", text)
    text = _BLANK_LINES.sub("\n\n", text)
    text = "\n".join(line.strip() for line in text.split("\n")).strip()
    if text or not html:
        return text
    return EMPTY_TEXT_FALLBACK


def build_envelope(
    mail: MailMessage | Mapping[str, Any],
    *,
    max_workers: int = 4,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> SendRequest:
    """Validate ``mail`` and resolve its attachments.

    Checks run in a fixed order and the first violation is raised as a
    ``ValidationError``; attachment failures propagate as ``AttachmentError``.
    Nothing is normalized until every envelope check has passed.
    """
    if isinstance(mail, Mapping):
        mail = MailMessage.from_mapping(mail)

    if _is_missing(mail.from_):
        raise _missing("from", ADDRESS_HINT)
    sender = parse_address(mail.from_, "from")

    if _is_missing(mail.to):
        raise _missing("to", ADDRESS_HINT)
    to = parse_address_list(mail.to, "to")

    if not isinstance(mail.subject, str) or not mail.subject.strip():
        raise ValidationError(
            'Missing required field "subject".',
            field="subject",
            value=mail.subject,
            hint="Provide a non-empty subject line.",
        )

    if not mail.text and not mail.html:
        raise ValidationError(
            'Missing message body: provide "text" or "html".',
            field="text",
            value=None,
            hint="At least one of text or html is required.",
        )

    cc = _optional_addresses(mail.cc, "cc")
    bcc = _optional_addresses(mail.bcc, "bcc")
    reply_to = _optional_addresses(mail.reply_to, "replyTo")

    if mail.attachments is None:
        attachments = []
    elif isinstance(mail.attachments, (list, tuple)):
        attachments = list(mail.attachments)
    else:
        raise ValidationError(
            f"Invalid \"attachments\": expected a list, got {type(mail.attachments).__name__}.",
            field="attachments",
            value=mail.attachments,
            hint="Wrap a single attachment in a list: attachments=[{...}].",
        )
    if len(attachments) > MAX_ATTACHMENTS:
        raise ValidationError(
            f"Maximum {MAX_ATTACHMENTS} attachments allowed, got {len(attachments)}.",
            field="attachments",
            value=len(attachments),
            hint="Send fewer attachments or split the message.",
        )

    text = mail.text
    if not text and mail.html:
        text = html_to_text(mail.html)

    normalized = normalize_attachments(
        attachments, max_workers=max_workers, fetch_timeout=fetch_timeout
    )
    logger.debug(
        "Envelope ready: %d recipient(s), %d attachment(s)",
        len(to) + len(cc) + len(bcc),
        len(normalized),
    )
    return SendRequest(
        from_=sender,
        to=to,
        subject=mail.subject,
        text=text or None,
        html=mail.html or None,
        cc=cc,
        bcc=bcc,
        reply_to=reply_to,
        attachments=tuple(normalized),
    )


def normalize_attachments(
    attachments: Sequence[Any],
    *,
    max_workers: int = 4,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> list[NormalizedAttachment]:
    """Normalize attachments concurrently, keeping input order.

    If several fail, the first failure in input order is raised once all
    of them have finished.
    """
    if not attachments:
        return []
    if len(attachments) == 1:
        return [normalize_attachment(attachments[0], fetch_timeout=fetch_timeout)]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(attachments))) as executor:
        futures = [
            executor.submit(normalize_attachment, item, fetch_timeout=fetch_timeout)
            for item in attachments
        ]
    return [future.result() for future in futures]


def _optional_addresses(value: Any, field: str):
    if _is_missing(value):
        return ()
    return parse_address_list(value, field)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return not value
    return False


def _missing(field: str, hint: str) -> ValidationError:
    return ValidationError(
        f'Missing required field "{field}".', field=field, value=None, hint=hint
    )
