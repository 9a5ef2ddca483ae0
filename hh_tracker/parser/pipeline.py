"""Turn a raw hh.ru paste into deduplicated candidate records."""

from __future__ import annotations

from collections.abc import Iterable

from hh_tracker.parser.classifier import grade, role_family
from hh_tracker.parser.fields import extract_fields
from hh_tracker.parser.segmenter import segment
from hh_tracker.parser.vocabulary import NOISE_SUBSTRINGS
from hh_tracker.tracker.fingerprint import compute_fingerprint
from hh_tracker.tracker.models import Block, CandidateRecord
from hh_tracker.utils.logging import get_logger

logger = get_logger("parser")


def build_record(block: Block) -> CandidateRecord:
    """Extract, classify and fingerprint a single block."""
    fields = extract_fields(block.lines)
    status = block.status
    return CandidateRecord(
        title=fields.title,
        company=fields.company,
        status=status,
        response_date=fields.response_date,
        role_family=role_family(fields.title),
        grade=grade(fields.title),
        fingerprint=compute_fingerprint(
            fields.title, fields.company, fields.response_date, status
        ),
        raw_summary=" | ".join(
            (fields.title, fields.company, fields.response_date, status.value)
        ),
    )


def ingest(raw_text: str, noise: Iterable[str] = NOISE_SUBSTRINGS) -> list[CandidateRecord]:
    """Parse a paste into candidate records.

    Records keep paste order. When two blocks produce the same fingerprint
    (the user sent the same fragment twice) only the first one is kept.
    An empty list is a normal result: the text had no status lines.

    Args:
        raw_text: Text accumulated from one or more pasted messages.
        noise: Substrings marking boilerplate lines.

    Returns:
        Deduplicated candidate records.
    """
    blocks = segment(raw_text, noise)

    records: list[CandidateRecord] = []
    seen: set[str] = set()
    for block in blocks:
        record = build_record(block)
        if record.fingerprint in seen:
            continue
        seen.add(record.fingerprint)
        records.append(record)

    logger.debug(
        "Parsed %d blocks into %d records (%d repeated in paste)",
        len(blocks),
        len(records),
        len(blocks) - len(records),
    )
    return records
