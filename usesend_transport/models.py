"""Typed containers shared across the send pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Address:
    """A validated email address with an optional display name."""

    address: str
    name: Optional[str] = None
    raw: Optional[str] = None

    @property
    def local_part(self) -> str:
        return self.address.rsplit("@", 1)[0]

    @property
    def domain(self) -> str:
        return self.address.rsplit("@", 1)[1]

    def formatted(self) -> str:
        """Payload form: the caller's original string when there was one."""
        if self.raw:
            return self.raw
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


@dataclass
class Attachment:
    """Attachment as described by the caller.

    At most one content source is used, in this order: ``raw``, ``path``,
    ``content``. ``filename`` and ``content_type`` are hints only.
    """

    filename: Optional[str] = None
    content: Any = None
    path: Any = None
    encoding: Optional[str] = None
    content_type: Optional[str] = None
    raw: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Attachment":
        filename = data.get("filename")
        return cls(
            filename=filename if isinstance(filename, str) and filename else None,
            content=data.get("content"),
            path=data.get("path"),
            encoding=data.get("encoding"),
            content_type=data.get("contentType") or data.get("content_type"),
            raw=data.get("raw"),
        )


@dataclass(frozen=True)
class NormalizedAttachment:
    """Attachment in API form: a filename and standard base64 content."""

    filename: str
    content: str

    def to_payload(self) -> dict[str, str]:
        return {"filename": self.filename, "content": self.content}


@dataclass
class MailMessage:
    """Mail description handed to the transport before validation."""

    from_: Any = None
    to: Any = None
    subject: Any = None
    text: Optional[str] = None
    html: Optional[str] = None
    cc: Any = None
    bcc: Any = None
    reply_to: Any = None
    attachments: list[Any] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MailMessage":
        reply_to = data.get("replyTo")
        if reply_to is None:
            reply_to = data.get("reply_to")
        attachments = data.get("attachments")
        return cls(
            from_=data.get("from", data.get("from_")),
            to=data.get("to"),
            subject=data.get("subject"),
            text=data.get("text"),
            html=data.get("html"),
            cc=data.get("cc"),
            bcc=data.get("bcc"),
            reply_to=reply_to,
            attachments=[] if attachments is None else attachments,
        )


@dataclass(frozen=True)
class SendRequest:
    """Fully validated envelope, ready to be serialized for the API."""

    from_: Address
    to: tuple[Address, ...]
    subject: str
    text: Optional[str] = None
    html: Optional[str] = None
    cc: tuple[Address, ...] = ()
    bcc: tuple[Address, ...] = ()
    reply_to: tuple[Address, ...] = ()
    attachments: tuple[NormalizedAttachment, ...] = ()

    @property
    def recipients(self) -> list[Address]:
        return [*self.to, *self.cc, *self.bcc]

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the emails endpoint; absent optional fields are omitted."""
        payload: dict[str, Any] = {
            "from": self.from_.formatted(),
            "to": [addr.formatted() for addr in self.to],
            "subject": self.subject,
        }
        if self.cc:
            payload["cc"] = [addr.formatted() for addr in self.cc]
        if self.bcc:
            payload["bcc"] = [addr.formatted() for addr in self.bcc]
        if self.reply_to:
            payload["reply_to"] = [addr.formatted() for addr in self.reply_to]
        if self.text is not None:
            payload["text"] = self.text
        if self.html is not None:
            payload["html"] = self.html
        if self.attachments:
            payload["attachments"] = [item.to_payload() for item in self.attachments]
        return payload


@dataclass
class SendResult:
    """Outcome of an accepted send."""

    message_id: Optional[str]
    envelope: dict[str, Any]
    accepted: list[str]
    response: Any = None
