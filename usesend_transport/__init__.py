"""Usesend transport: send mail through the Usesend HTTP API.

Example:
    from usesend_transport import make_transport

    transport = make_transport(api_key="us_...")
    result = transport.send_mail(
        {
            "from": "Acme <hello@acme.dev>",
            "to": "user@example.com",
            "subject": "Welcome",
            "html": "<p>Hi!</p>",
            "attachments": [{"path": "reports/q1.pdf"}],
        }
    )
    print(result.message_id)
"""

__version__ = "1.0.0"

from .attachments import normalize_attachment  # noqa: E402
from .errors import (  # noqa: E402
    ApiError,
    AttachmentError,
    AuthenticationError,
    AuthorizationError,
    ErrorKind,
    MissingAttachmentContentError,
    NetworkError,
    RateLimitError,
    ServerError,
    UsesendError,
    ValidationError,
)
from .models import Address, Attachment, MailMessage, NormalizedAttachment, SendRequest, SendResult  # noqa: E402
from .transport import UsesendTransport, make_transport  # noqa: E402

__all__ = [
    "Address",
    "ApiError",
    "Attachment",
    "AttachmentError",
    "AuthenticationError",
    "AuthorizationError",
    "ErrorKind",
    "MailMessage",
    "MissingAttachmentContentError",
    "NetworkError",
    "NormalizedAttachment",
    "RateLimitError",
    "SendRequest",
    "SendResult",
    "ServerError",
    "UsesendError",
    "UsesendTransport",
    "ValidationError",
    "make_transport",
    "normalize_attachment",
]
