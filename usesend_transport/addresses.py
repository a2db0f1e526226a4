"""Email address parsing and validation for envelope fields."""

from __future__ import annotations

import re
from typing import Any, Mapping

from .errors import ValidationError
from .models import Address

ADDRESS_HINT = 'Expected format: user@example.com or "Display Name <user@example.com>".'

_LOCAL_FORBIDDEN = re.compile(r'[\s<>()\[\]\\,;:"@]')
_LABEL = re.compile(r"^[^\W_](?:[\w-]*[^\W_])?$")


def is_valid_email(value: str) -> bool:
    """Check a bare ``local@domain`` string."""
    if value.count("@") != 1:
        return False
    local, domain = value.split("@")
    if not local or _LOCAL_FORBIDDEN.search(local):
        return False
    labels = domain.split(".")
    if len(labels) < 2:
        return False
    return all(_LABEL.match(label) and "_" not in label for label in labels)


def split_display_name(value: str) -> tuple[str | None, str] | None:
    """Split ``Name <addr>`` into ``(name, addr)``.

    Returns ``(None, value)`` for a bare address and ``None`` when the angle
    brackets are unbalanced or followed by extra text.
    """
    if "<" not in value:
        if ">" in value:
            return None
        return None, value

    head, _, rest = value.partition("<")
    address, closed, tail = rest.partition(">")
    if not closed or tail.strip():
        return None

    name = head.strip()
    if len(name) >= 2 and name[0] == name[-1] and name[0] in "\"'":
        name = name[1:-1].strip()
    return name or None, address.strip()


def parse_address(value: Any, field: str) -> Address:
    """Validate one address for ``field``; raise ``ValidationError`` otherwise."""
    if isinstance(value, Address):
        value = {"name": value.name, "address": value.address} if not value.raw else value.raw

    if isinstance(value, Mapping):
        email = value.get("address")
        name = value.get("name") or None
        if not isinstance(email, str) or not is_valid_email(email.strip()):
            raise _invalid(field, email)
        return Address(address=email.strip(), name=name)

    if not isinstance(value, str):
        raise _invalid(field, value)

    candidate = value.strip()
    parts = split_display_name(candidate)
    if parts is None:
        raise _invalid(field, value)
    name, email = parts
    if not is_valid_email(email):
        raise _invalid(field, value)
    return Address(address=email, name=name, raw=candidate)


def parse_address_list(value: Any, field: str) -> tuple[Address, ...]:
    """Validate a single address or a list of them, element by element."""
    if isinstance(value, (str, Mapping, Address)):
        return (parse_address(value, field),)
    if isinstance(value, (list, tuple)):
        return tuple(parse_address(item, field) for item in value)
    raise _invalid(field, value)


def _invalid(field: str, value: Any) -> ValidationError:
    return ValidationError(
        f'Invalid "{field}" address: "{value}".',
        field=field,
        value=value,
        hint=ADDRESS_HINT,
    )
