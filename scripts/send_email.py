"""Entry point that sends one email (with attachments) through Usesend."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv
from pydantic import ValidationError as SettingsError

# Ensure project root is on sys.path when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from usesend_transport import MailMessage, UsesendError, make_transport

load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send an email through the Usesend API.")
    parser.add_argument("--from", dest="sender", required=True, help="Sender address")
    parser.add_argument("--to", action="append", required=True, help="Recipient (repeatable)")
    parser.add_argument("--cc", action="append", help="Cc recipient (repeatable)")
    parser.add_argument("--bcc", action="append", help="Bcc recipient (repeatable)")
    parser.add_argument("--reply-to", action="append", help="Reply-To address (repeatable)")
    parser.add_argument("--subject", required=True, help="Subject line")
    parser.add_argument("--text", help="Plain-text body")
    parser.add_argument("--html", help="HTML body")
    parser.add_argument(
        "--attach",
        action="append",
        default=[],
        help="File path, http(s) URL or data: URI to attach (repeatable)",
    )
    parser.add_argument("--api-url", help="Override USESEND_API_URL")
    parser.add_argument("--dry-run", action="store_true", help="Validate and build the payload without sending")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_message(args: argparse.Namespace) -> MailMessage:
    return MailMessage(
        from_=args.sender,
        to=args.to,
        cc=args.cc,
        bcc=args.bcc,
        reply_to=args.reply_to,
        subject=args.subject,
        text=args.text,
        html=args.html,
        attachments=[{"path": item} for item in args.attach],
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        transport = make_transport(api_url=args.api_url)
    except SettingsError as exc:
        configure_logging("INFO")
        fields = ", ".join(str(error["loc"][0]) for error in exc.errors() if error["loc"])
        logging.error("Invalid configuration for %s; check the USESEND_* variables or .env", fields or "settings")
        return 2
    configure_logging(transport.settings.log_level)
    message = build_message(args)

    try:
        if args.dry_run:
            request = transport.build(message)
            logging.info(
                "[DRY-RUN] Would send '%s' to %s with attachments %s",
                request.subject,
                ", ".join(addr.formatted() for addr in request.recipients),
                [item.filename for item in request.attachments] or "none",
            )
            return 0
        result = transport.send_mail(message)
    except UsesendError as exc:
        logging.error("Send failed [%s]: %s", exc.kind.value, exc)
        return 1

    logging.info("Sent: message id %s", result.message_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
