"""
Template filters.

Every filter is a plain function of the piped value plus arguments. The
engine wraps them so a failure is reported as ``<name> filter: <message>``.
"""

from __future__ import annotations

import base64
import hashlib
import json
import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote, unquote

import yaml
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

DEFAULT_IV = "0123456789abcdef0123456789abcdef"
DEFAULT_CIPHER = "aes-256-cbc"
DEFAULT_DATE_FORMAT = "YYYY-MM-DD HH:mm:ss"

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_DATE_TOKEN_RE = re.compile(r"\[([^\]]*)]|YYYY|YY|M{1,4}|D{1,2}|d{1,4}|H{1,2}|h{1,2}|m{1,2}|s{1,2}|SSS|Z{1,2}|A|a")
_MALFORMED_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_uri_component(value: Any) -> str:
    """Percent-encode everything except ``A-Z a-z 0-9 - _ . ! ~ * ' ( )``."""
    return quote(str(value), safe="!*'()")


def decode_uri_component(value: Any) -> str:
    """
    Reverse ``encode_uri_component``.

    Raises:
        ValueError: On a ``%`` not followed by two hex digits, or escapes that
            do not decode as UTF-8.
    """
    text = str(value)
    if _MALFORMED_ESCAPE_RE.search(text):
        raise ValueError(f"URI malformed: {text!r}")
    return unquote(text, errors="strict")


def base64_encode(value: Any) -> str:
    return base64.b64encode(str(value).encode("utf-8")).decode("ascii")


def base64_decode(value: Any) -> str:
    return base64.b64decode(str(value)).decode("utf-8")


def hash_value(value: Any, algorithm: str = "sha256") -> str:
    """Hex digest of the UTF-8 value with any ``hashlib`` algorithm."""
    return hashlib.new(algorithm, str(value).encode("utf-8")).hexdigest()


def _cipher(secret: str, iv: str, algorithm: str) -> Cipher:
    if algorithm.lower() != DEFAULT_CIPHER:
        raise ValueError(f"Unsupported algorithm: {algorithm}")
    key = hashlib.sha256(secret.encode("utf-8")).digest()
    return Cipher(algorithms.AES(key), modes.CBC(bytes.fromhex(iv)))


def _cipher_options(options: dict | None, secret: str, iv: str, algorithm: str) -> tuple[str, str, str]:
    options = options or {}
    return (
        str(options.get("secret", secret)),
        str(options.get("iv", iv)),
        str(options.get("algorithm", algorithm)),
    )


def encrypt(
    value: Any,
    options: dict | None = None,
    secret: str = "",
    iv: str = DEFAULT_IV,
    algorithm: str = DEFAULT_CIPHER,
) -> str:
    """
    Encrypt with AES-256-CBC and return hex.

    The key is the SHA-256 of ``secret``. Options may be given as keyword
    arguments or as one mapping: ``encrypt(secret="k")`` or
    ``encrypt({"secret": "k"})``. The IV has a fixed default; pass ``iv``
    for anything that leaves the machine.
    """
    secret, iv, algorithm = _cipher_options(options, secret, iv, algorithm)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    plaintext = padder.update(str(value).encode("utf-8")) + padder.finalize()

    encryptor = _cipher(secret, iv, algorithm).encryptor()
    return (encryptor.update(plaintext) + encryptor.finalize()).hex()


def decrypt(
    value: Any,
    options: dict | None = None,
    secret: str = "",
    iv: str = DEFAULT_IV,
    algorithm: str = DEFAULT_CIPHER,
) -> str:
    """Reverse of ``encrypt``."""
    secret, iv, algorithm = _cipher_options(options, secret, iv, algorithm)
    decryptor = _cipher(secret, iv, algorithm).decryptor()
    padded = decryptor.update(bytes.fromhex(str(value))) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

    text = str(value).strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = re.sub(r"\.(\d+)", lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date: {value}") from None


def _format_offset(moment: datetime, separator: str) -> str:
    offset = moment.utcoffset()
    if offset is None:
        return f"+00{separator}00"
    minutes = int(offset.total_seconds() // 60)
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _date_token(moment: datetime, token: str) -> str:
    weekday = (moment.weekday() + 1) % 7
    hour12 = moment.hour % 12 or 12
    values = {
        "YYYY": f"{moment.year:04d}",
        "YY": f"{moment.year % 100:02d}",
        "M": str(moment.month),
        "MM": f"{moment.month:02d}",
        "MMM": _MONTHS[moment.month - 1][:3],
        "MMMM": _MONTHS[moment.month - 1],
        "D": str(moment.day),
        "DD": f"{moment.day:02d}",
        "d": str(weekday),
        "dd": _WEEKDAYS[weekday][:2],
        "ddd": _WEEKDAYS[weekday][:3],
        "dddd": _WEEKDAYS[weekday],
        "H": str(moment.hour),
        "HH": f"{moment.hour:02d}",
        "h": str(hour12),
        "hh": f"{hour12:02d}",
        "m": str(moment.minute),
        "mm": f"{moment.minute:02d}",
        "s": str(moment.second),
        "ss": f"{moment.second:02d}",
        "SSS": f"{moment.microsecond // 1000:03d}",
        "Z": _format_offset(moment, ":"),
        "ZZ": _format_offset(moment, ""),
        "A": "AM" if moment.hour < 12 else "PM",
        "a": "am" if moment.hour < 12 else "pm",
    }
    return values[token]


def format_date(value: Any, format: str = DEFAULT_DATE_FORMAT) -> str:
    """
    Format a date with day.js style tokens, English names only.

    Numbers are epoch milliseconds (UTC), strings are ISO 8601. Text inside
    square brackets is kept as is.

    Examples:
        >>> format_date("2024-03-05T07:08:09Z", "DD/MM/YYYY [at] HH:mm")
        '05/03/2024 at 07:08'
    """
    moment = _to_datetime(value)
    return _DATE_TOKEN_RE.sub(
        lambda m: m.group(1) if m.group(1) is not None else _date_token(moment, m.group(0)),
        format,
    )


def to_json(value: Any, indent: int | None = 2) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def to_yaml(value: Any) -> str:
    return yaml.safe_dump(value, sort_keys=False, allow_unicode=True, default_flow_style=False)


def _key_value_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def key_value(value: Any) -> str:
    """
    Flatten a mapping into ``KEY=value`` lines.

    Values are neither quoted nor escaped, so a value holding a newline
    produces a broken line.

    Examples:
        >>> key_value({"A": "1", "B": "2"})
        'A=1\\nB=2'
    """
    if not isinstance(value, dict):
        raise TypeError(f"expected a mapping, got {type(value).__name__}")
    return "\n".join(f"{key}={_key_value_scalar(item)}" for key, item in value.items())


FILTERS = {
    "encodeURIComponent": encode_uri_component,
    "decodeURIComponent": decode_uri_component,
    "base64encode": base64_encode,
    "base64decode": base64_decode,
    "hash": hash_value,
    "encrypt": encrypt,
    "decrypt": decrypt,
    "formatDate": format_date,
    "json": to_json,
    "keyValue": key_value,
    "yaml": to_yaml,
}
