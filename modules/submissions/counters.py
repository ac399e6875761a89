"""Unread/total counting over a collection of submissions."""
from typing import Iterable, NamedTuple

from .status import is_unread


class Counts(NamedTuple):
    """Badge counts for one submission kind."""

    total: int = 0
    unread: int = 0

    @property
    def read(self) -> int:
        return self.total - self.unread


EMPTY_COUNTS = Counts(0, 0)


def count_submissions(records: Iterable) -> Counts:
    """Count all records and the unread ones among them."""
    total = 0
    unread = 0
    for record in records:
        total += 1
        if is_unread(record.status):
            unread += 1
    return Counts(total=total, unread=unread)
