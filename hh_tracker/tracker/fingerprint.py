"""Fingerprint generation for parsed responses.

The fingerprint is a 64-bit FNV-1a hash of ``title|company|date|status``
taken over UTF-16 code units and rendered as 16 hex characters. It is a
dedup key only. It is NOT a cryptographic digest and must never be used
for authentication or integrity checks.
"""

from enum import Enum

FNV64_OFFSET_BASIS = 0xCBF29CE484222325
FNV64_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def _code_units(text: str) -> list[int]:
    """Return the UTF-16 code units of ``text`` (surrogate pairs split)."""
    data = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def fnv1a64_hex(text: str) -> str:
    """Hash ``text`` with FNV-1a 64 and return zero-padded lowercase hex."""
    value = FNV64_OFFSET_BASIS
    for unit in _code_units(text):
        value ^= unit
        value = (value * FNV64_PRIME) & _MASK64
    return f"{value:016x}"


def _field(value: object) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def compute_fingerprint(title: str, company: str, date: str, status: object) -> str:
    """Compute the dedup fingerprint of a response.

    Args:
        title: Vacancy title.
        company: Company name.
        date: Response date as parsed (or the "Unknown" sentinel).
        status: Status label or ``StatusTag``.

    Returns:
        16-character hex string.
    """
    source = "|".join(_field(part) for part in (title, company, date, status))
    return fnv1a64_hex(source)
