"""Mail-library transport backed by the Usesend HTTP API."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from . import __version__
from .client import UsesendClient
from .config import Settings
from .envelope import build_envelope
from .models import MailMessage, SendRequest, SendResult

logger = logging.getLogger(__name__)

SendCallback = Callable[[Optional[BaseException], Optional[SendResult]], Any]


class UsesendTransport:
    """Transport with the ``send(mail, callback)`` contract mail libraries expect.

    Configuration is fixed at construction; instances hold no per-send state
    and may be shared across threads.
    """

    name = "UsesendTransport"
    version = __version__

    def __init__(self, settings: Settings, client: UsesendClient | None = None) -> None:
        self.settings = settings
        self.client = client or UsesendClient(settings)

    @classmethod
    def make_transport(
        cls,
        api_key: str | None = None,
        api_url: str | None = None,
        **options: Any,
    ) -> "UsesendTransport":
        """Build a transport; missing options fall back to USESEND_* variables."""
        settings = Settings.from_options(api_key=api_key, api_url=api_url, **options)
        return cls(settings)

    def build(self, mail: MailMessage | Mapping[str, Any]) -> SendRequest:
        """Validate ``mail`` and resolve attachments without sending anything."""
        return build_envelope(
            _mail_data(mail),
            max_workers=self.settings.max_workers,
            fetch_timeout=self.settings.fetch_timeout,
        )

    def send_mail(self, mail: MailMessage | Mapping[str, Any]) -> SendResult:
        """Build and dispatch ``mail``; raises ``UsesendError`` subclasses."""
        return self.client.send_email(self.build(mail))

    def send(self, mail: Any, callback: SendCallback) -> None:
        """Send ``mail`` and report through ``callback(error, info)`` exactly once."""
        error: Optional[BaseException] = None
        info: Optional[SendResult] = None
        try:
            info = self.send_mail(mail)
        except Exception as exc:
            error = exc
        callback(error, info)


def make_transport(api_key: str | None = None, api_url: str | None = None, **options: Any) -> UsesendTransport:
    return UsesendTransport.make_transport(api_key=api_key, api_url=api_url, **options)


def _mail_data(mail: Any) -> MailMessage | Mapping[str, Any]:
    # Mail libraries hand transports a wrapper exposing the options as ``data``.
    if isinstance(mail, (MailMessage, Mapping)):
        return mail
    data = getattr(mail, "data", None)
    if isinstance(data, (MailMessage, Mapping)):
        return data
    raise TypeError(f"Unsupported mail object: {type(mail).__name__}")
