"""Property, custodian slip and transfer number generation.

Numbers look like ``PREFIX-YYYY-NNNN`` (``SPLV-2025-0001``,
``ICS-SPHV-2025-0012``, ``PTR-2025-0003``). The next number for a
prefix and year is one past the highest sequence already stored,
re-checked against the store before it is handed out. Nothing here
holds a lock: two callers can still be given the same number, and the
unique constraint on the numbering columns is what rejects the loser.
"""

import logging
import re
from typing import NamedTuple

from django.conf import settings
from django.utils import timezone

from ..exceptions import ExhaustedRetries
from .categories import PROPERTY_PREFIXES, property_prefix, slip_prefix
from .store import get_default_store

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 4
MAX_SEQUENCE = 10**SEQUENCE_WIDTH - 1

TRANSFER_PREFIX = "PTR"

_DIGITS = re.compile(r"[0-9]+")


def max_attempts() -> int:
    return int(getattr(settings, "SEQUENCE_MAX_ATTEMPTS", 10))


def format_number(prefix: str, scope_key, sequence: int) -> str:
    return f"{prefix}-{scope_key}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(value: str, stem: str) -> int | None:
    """Return the trailing sequence of ``value`` if it starts with ``stem``.

    Malformed values (wrong stem, non-numeric tail) give ``None``.
    """
    if not value or not value.startswith(stem):
        return None
    tail = value[len(stem) :]
    if not _DIGITS.fullmatch(tail):
        return None
    return int(tail)


class SequenceGenerator:
    """Mints the next free number stored in ``table.field``."""

    def __init__(self, table, field, store=None, attempts=None):
        self.table = table
        self.field = field
        self.store = store or get_default_store()
        self.attempts = attempts or max_attempts()

    def highest_sequence(self, stem: str) -> int:
        rows = self.store.select(self.table, like={self.field: f"{stem}%"})
        sequences = (parse_sequence(row[self.field], stem) for row in rows)
        return max((s for s in sequences if s is not None), default=0)

    def exists(self, number: str) -> bool:
        return bool(self.store.select(self.table, {self.field: number}, limit=1))

    def next_number(self, prefix: str, scope_key) -> str:
        """Return the next unused ``prefix-scope_key-NNNN`` number.

        Raises ExhaustedRetries when every candidate within the attempt
        bound is taken, or when the four-digit sequence space is used
        up. Store errors propagate unchanged.
        """
        stem = f"{prefix}-{scope_key}-"
        candidate = self.highest_sequence(stem) + 1

        for attempt in range(1, self.attempts + 1):
            if candidate > MAX_SEQUENCE:
                raise ExhaustedRetries(
                    f"No {stem}NNNN numbers left: the sequence is limited "
                    f"to {MAX_SEQUENCE}."
                )
            number = format_number(prefix, scope_key, candidate)
            if not self.exists(number):
                logger.debug(
                    "Generated %s (attempt %d)", number, attempt
                )
                return number
            logger.warning(
                "%s already exists, trying next sequence", number
            )
            candidate += 1

        raise ExhaustedRetries(
            f"Unable to generate a unique {stem}NNNN number after "
            f"{self.attempts} attempts."
        )


def current_year() -> int:
    return timezone.localdate().year


def next_property_number(sub_category, year=None, store=None) -> str:
    """Next SPLV/SPHV property number for the given year."""
    generator = SequenceGenerator(
        "inventory_items", "property_number", store=store
    )
    return generator.next_number(
        property_prefix(sub_category), year or current_year()
    )


def next_slip_number(sub_category, year=None, store=None) -> str:
    """Next ICS-SPLV/ICS-SPHV custodian slip number for the given year."""
    generator = SequenceGenerator(
        "custodian_slips", "slip_number", store=store
    )
    return generator.next_number(
        slip_prefix(sub_category), year or current_year()
    )


def next_transfer_number(year=None, store=None) -> str:
    """Next PTR transfer number for the given year."""
    generator = SequenceGenerator("transfers", "transfer_number", store=store)
    return generator.next_number(TRANSFER_PREFIX, year or current_year())


class PropertyNumber(NamedTuple):
    prefix: str
    year: str
    sequence: str
    full_number: str


_PROPERTY_NUMBER = re.compile(
    r"(?P<prefix>[A-Z]+)-(?P<year>[0-9]{4})"
    r"(?:-(?P<month>0[1-9]|1[0-2]))?-(?P<sequence>[0-9]{4})"
)


def parse_property_number(value: str) -> PropertyNumber | None:
    """Split a property number into its parts.

    Accepts ``PREFIX-YYYY-NNNN`` and the older ``PREFIX-YYYY-MM-NNNN``
    layout. Returns None for anything else, including unknown prefixes.
    """
    match = _PROPERTY_NUMBER.fullmatch(value or "")
    if not match or match["prefix"] not in PROPERTY_PREFIXES.values():
        return None
    return PropertyNumber(
        prefix=match["prefix"],
        year=match["year"],
        sequence=match["sequence"],
        full_number=value,
    )


def is_valid_property_number(value: str) -> bool:
    return parse_property_number(value) is not None
