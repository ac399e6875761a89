"""List-view filters over a projection snapshot."""
from typing import Iterable, Optional

from .models import Application, Submission

ALL = "all"


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()


def matches_search(record: Submission, term: str) -> bool:
    """Case-insensitive match on name and email; inquiries also match phone."""
    needle = term.strip().lower()
    if not needle:
        return True
    if _contains(record.full_name, needle) or _contains(record.email, needle):
        return True
    if not isinstance(record, Application):
        return _contains(record.phone, needle)
    return False


def matches_availability(record: Submission, availability: str) -> bool:
    if not availability or availability.lower() == ALL:
        return True
    if not isinstance(record, Application):
        return True
    return _contains(record.availability, availability.strip().lower())


def filter_submissions(records: Iterable[Submission], search: str = "",
                       availability: str = ALL) -> list[Submission]:
    """Apply search and availability filters, keeping the feed order."""
    return [
        r for r in records
        if matches_search(r, search) and matches_availability(r, availability)
    ]
