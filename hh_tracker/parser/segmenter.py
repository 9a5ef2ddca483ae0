"""Split a raw paste into status-terminated blocks."""

from __future__ import annotations

import re
from collections.abc import Iterable

from hh_tracker.parser.vocabulary import NOISE_SUBSTRINGS
from hh_tracker.tracker.models import Block, StatusTag

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def is_noise(line: str, noise: Iterable[str] = NOISE_SUBSTRINGS) -> bool:
    """Return True if ``line`` contains any boilerplate substring."""
    return any(fragment in line for fragment in noise)


def split_lines(text: str, noise: Iterable[str] = NOISE_SUBSTRINGS) -> list[str]:
    """Return trimmed, non-empty, non-noise lines of ``text``."""
    noise = tuple(noise)
    lines: list[str] = []
    for raw_line in _LINE_BREAK.split(text or ""):
        line = raw_line.strip()
        if not line or is_noise(line, noise):
            continue
        lines.append(line)
    return lines


def segment(text: str, noise: Iterable[str] = NOISE_SUBSTRINGS) -> list[Block]:
    """Group the lines of a paste into blocks.

    Every line whose whole content is a status label closes the block
    collected so far. A status with nothing before it yields no block, and
    lines after the last status are dropped until more text arrives.

    Args:
        text: The raw pasted text.
        noise: Substrings marking boilerplate lines.

    Returns:
        Completed blocks in paste order.
    """
    blocks: list[Block] = []
    current: list[str] = []

    for line in split_lines(text, noise):
        status = StatusTag.from_line(line)
        if status is None:
            current.append(line)
            continue
        if current:
            blocks.append(Block(lines=current, status=status))
        current = []

    return blocks
