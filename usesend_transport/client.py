"""Usesend emails endpoint client."""

from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from .config import Settings
from .errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    NetworkError,
    RateLimitError,
    ServerError,
)
from .models import SendRequest, SendResult

logger = logging.getLogger(__name__)


class UsesendClient:
    """POST validated envelopes to the emails endpoint and map the answer."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def send_email(self, request: SendRequest) -> SendResult:
        """Send one email and return the provider's message id.

        Raises an ``ApiError`` subclass for non-2xx answers and
        ``NetworkError`` when no response was received. Never retries.
        """
        url = self.settings.emails_url
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = request.to_payload()

        logger.info(
            "Sending email to %d recipient(s) with %d attachment(s)",
            len(request.recipients),
            len(request.attachments),
        )
        try:
            response = self.session.post(
                url, headers=headers, json=payload, timeout=self.settings.request_timeout
            )
        except requests.RequestException as exc:
            raise NetworkError(
                f"Network error while contacting {url}: {exc}",
                hint="Check connectivity and the configured api_url.",
            ) from exc

        body = self._parse_response_body(response)
        if not 200 <= response.status_code < 300:
            logger.error("Usesend request failed (%s): %s", response.status_code, response.text)
            raise self._error_for(response.status_code, body, response.text)

        message_id = self._extract_message_id(body)
        if message_id is None:
            logger.warning("Usesend response did not include a message id; response=%s", body)
        else:
            logger.info("Usesend accepted email %s", message_id)

        return SendResult(
            message_id=message_id,
            envelope={
                "from": request.from_.address,
                "to": [addr.address for addr in request.to],
            },
            accepted=[addr.address for addr in request.recipients],
            response=body,
        )

    @staticmethod
    def _error_for(status: int, body: Any, text: str) -> ApiError:
        detail = UsesendClient._extract_error_detail(body)
        common = {"status_code": status, "response_body": body}

        if status == 400:
            return ApiError(
                f"Invalid request (400): {detail}",
                hint="Check for malformed or missing fields (addresses, subject, body, attachments).",
                **common,
            )
        if status == 401:
            return AuthenticationError(
                f"Authentication failed (401): {detail}",
                hint="Check that the API key (USESEND_API_KEY) is correct.",
                **common,
            )
        if status == 403:
            return AuthorizationError(
                f"Permission denied (403): {detail}",
                hint="The API key lacks permission for this action or sender domain.",
                **common,
            )
        if status == 429:
            return RateLimitError(
                f"Rate limit exceeded (429): {detail}",
                hint="Back off and retry later.",
                **common,
            )
        if status >= 500:
            return ServerError(
                f"Usesend server error ({status}): {text}",
                hint="The provider failed; retry later or contact support if it persists.",
                **common,
            )
        return ApiError(
            f"Unexpected response ({status}): {detail}",
            hint="Check the request and the configured api_url.",
            **common,
        )

    @staticmethod
    def _parse_response_body(response) -> dict | str:
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _extract_message_id(payload) -> str | None:
        if isinstance(payload, dict):
            message_id = payload.get("id") or payload.get("emailId")
            return str(message_id) if message_id is not None else None
        return None

    @staticmethod
    def _extract_error_detail(payload) -> str:
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if payload.get("message"):
                return str(payload["message"])
            if isinstance(error, str) and error:
                return error
        if isinstance(payload, str) and payload.strip():
            return payload.strip()
        return "no details provided"

