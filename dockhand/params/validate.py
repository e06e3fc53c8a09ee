"""Input validators for deploy parameters."""

import re

_IPV4_RE = re.compile(r"[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}")
_PORT_RE = re.compile(r"[0-9]+")

URL_SCHEMES = ("http://", "https://", "git://")

MIN_PORT = 1
MAX_PORT = 65535


def validate_ip(value: str) -> bool:
    """Basic IPv4 shape check: four dot-separated groups of 1-3 digits.

    Octet ranges are not checked, so ``999.1.1.1`` passes.
    """
    return bool(_IPV4_RE.fullmatch(value))


def validate_port(value: str) -> bool:
    """True for a decimal integer in [1, 65535]."""
    if not _PORT_RE.fullmatch(value):
        return False
    return MIN_PORT <= int(value) <= MAX_PORT


def validate_url(value: str) -> bool:
    """True for URLs starting with http://, https:// or git://."""
    return value.startswith(URL_SCHEMES)
