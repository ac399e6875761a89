"""Tests for the submission status model.

Covers:
  - Effective status: missing and empty values default to new
  - Unknown values are rejected, including cross-kind values
  - The unread predicate
  - Per-kind collections, replied status and quick actions
"""
import pytest

from modules.submissions import (
    ApplicationStatus,
    InquiryStatus,
    InvalidStatusError,
    SubmissionKind,
    effective_status,
    is_unread,
    parse_status,
)
from modules.submissions.status import status_label

APPS = SubmissionKind.APPLICATIONS
INQS = SubmissionKind.INQUIRIES


class TestEffectiveStatus:

    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_status_is_new(self, raw):
        assert effective_status(APPS, raw) is ApplicationStatus.NEW
        assert effective_status(INQS, raw) is InquiryStatus.NEW

    def test_known_values_resolve(self):
        assert effective_status(APPS, "contacted") is ApplicationStatus.CONTACTED
        assert effective_status(INQS, "responded") is InquiryStatus.RESPONDED

    def test_enum_member_passes_through(self):
        assert effective_status(APPS, ApplicationStatus.HIRED) is ApplicationStatus.HIRED

    def test_unknown_value_rejected(self):
        with pytest.raises(InvalidStatusError) as exc:
            effective_status(APPS, "archived")
        assert exc.value.kind == "applications"
        assert exc.value.value == "archived"

    def test_cross_kind_value_rejected(self):
        with pytest.raises(InvalidStatusError):
            effective_status(INQS, "contacted")
        with pytest.raises(InvalidStatusError):
            effective_status(APPS, "responded")

    def test_other_kinds_member_converted_by_value(self):
        # "reviewed" exists in both enums
        assert effective_status(APPS, InquiryStatus.REVIEWED) is ApplicationStatus.REVIEWED

    def test_invalid_status_is_value_error(self):
        with pytest.raises(ValueError):
            effective_status(APPS, "bogus")


class TestParseStatus:

    @pytest.mark.parametrize("value", [None, ""])
    def test_requested_status_has_no_default(self, value):
        with pytest.raises(InvalidStatusError):
            parse_status(APPS, value)

    def test_valid_request(self):
        assert parse_status(INQS, "reviewed") is InquiryStatus.REVIEWED


class TestUnread:

    def test_only_new_is_unread(self):
        assert is_unread(ApplicationStatus.NEW)
        assert is_unread(InquiryStatus.NEW)
        for status in list(ApplicationStatus)[1:] + list(InquiryStatus)[1:]:
            assert not is_unread(status)

    def test_missing_status_counts_as_unread(self):
        assert is_unread(effective_status(APPS, None))


class TestSubmissionKind:

    def test_collections(self):
        assert APPS.collection == "applications"
        assert INQS.collection == "contacts"

    def test_replied_status(self):
        assert APPS.replied_status is ApplicationStatus.CONTACTED
        assert INQS.replied_status is InquiryStatus.RESPONDED

    def test_quick_actions(self):
        assert APPS.quick_actions == (ApplicationStatus.REVIEWED, ApplicationStatus.CONTACTED)
        assert INQS.quick_actions == (InquiryStatus.REVIEWED, InquiryStatus.RESPONDED)

    def test_labels(self):
        assert APPS.label == "application"
        assert INQS.label == "inquiry"
        assert status_label(ApplicationStatus.HIRED) == "Hired"
