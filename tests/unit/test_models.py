"""Tests for submission records and counting."""
from datetime import datetime, timezone

import pytest

from modules.submissions import (
    Application,
    ApplicationStatus,
    Counts,
    Inquiry,
    InvalidStatusError,
    SubmissionKind,
    count_submissions,
    filter_submissions,
    record_from_document,
)
from modules.submissions.counters import EMPTY_COUNTS
from modules.submissions.models import to_datetime


class TestToDatetime:

    def test_none_and_empty(self):
        assert to_datetime(None) is None
        assert to_datetime("") is None

    def test_iso_string_with_z(self):
        assert to_datetime("2026-01-15T10:00:00Z") == datetime(2026, 1, 15, 10, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self):
        assert to_datetime(datetime(2026, 1, 1)).tzinfo == timezone.utc

    def test_epoch_seconds(self):
        assert to_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            to_datetime(object())


class TestRecords:

    def test_application_field_mapping(self, sample_applications, now):
        app = Application.from_document("a1", sample_applications[0], now)
        assert app.full_name == "Sarah Johnson"
        assert app.status is ApplicationStatus.NEW
        assert app.unread is True
        assert app.education_background.startswith("BSc Nursing")
        assert app.resume_url == "https://example.com/resume-sarah.pdf"
        # phone doubles as contact information
        assert app.contact_information == "(555) 123-4567"

    def test_inquiry_name_fallback(self, sample_inquiries, now):
        inq = Inquiry.from_document("i1", sample_inquiries[0], now)
        assert inq.full_name == "Robert Thompson"
        assert inq.contact_email == "robert.thompson@email.com"

    def test_missing_created_at_uses_now(self, now):
        app = Application.from_document("a1", {"fullName": "X"}, now)
        assert app.created_at == now

    def test_unknown_status_fails(self):
        with pytest.raises(InvalidStatusError):
            record_from_document(SubmissionKind.INQUIRIES, "i1", {"status": "hired"})

    def test_with_status_is_a_copy(self, sample_applications, now):
        app = Application.from_document("a1", sample_applications[0], now)
        reviewed = app.with_status(ApplicationStatus.REVIEWED, now)
        assert app.status is ApplicationStatus.NEW
        assert reviewed.status is ApplicationStatus.REVIEWED
        assert reviewed.last_viewed == now
        assert reviewed.unread is False

    def test_serialises_camel_case(self, sample_applications, now):
        data = Application.from_document("a1", sample_applications[0], now).model_dump(
            mode="json", by_alias=True
        )
        assert data["fullName"] == "Sarah Johnson"
        assert data["status"] == "new"
        assert data["unread"] is True


class TestCounts:

    def test_feed_with_missing_status(self, now):
        """One document without status, one contacted → 1 unread of 2."""
        records = [
            record_from_document(SubmissionKind.APPLICATIONS, "a1", {}, now),
            record_from_document(SubmissionKind.APPLICATIONS, "a2", {"status": "contacted"}, now),
        ]
        assert count_submissions(records) == Counts(total=2, unread=1)

    def test_empty(self):
        assert count_submissions([]) == EMPTY_COUNTS
        assert EMPTY_COUNTS.read == 0

    def test_unread_never_exceeds_total(self, sample_applications, now):
        records = [
            Application.from_document(str(i), d, now)
            for i, d in enumerate(sample_applications)
        ]
        counts = count_submissions(records)
        assert 0 <= counts.unread <= counts.total == 3
        assert counts.read == 2


class TestFilters:

    @pytest.fixture
    def records(self, sample_applications, sample_inquiries, now):
        apps = [Application.from_document(f"a{i}", d, now) for i, d in enumerate(sample_applications)]
        inqs = [Inquiry.from_document(f"i{i}", d, now) for i, d in enumerate(sample_inquiries)]
        return apps, inqs

    def test_search_name_and_email(self, records):
        apps, _ = records
        assert [r.full_name for r in filter_submissions(apps, search="chen")] == ["Michael Chen"]
        assert len(filter_submissions(apps, search="WILLIAMS@")) == 1

    def test_inquiry_search_matches_phone(self, records):
        _, inqs = records
        assert [r.full_name for r in filter_submissions(inqs, search="567-8901")] == ["Lisa Anderson"]

    def test_application_search_ignores_phone(self, records):
        apps, _ = records
        assert filter_submissions(apps, search="123-4567") == []

    def test_availability(self, records):
        apps, _ = records
        assert [r.full_name for r in filter_submissions(apps, availability="part time")] == ["Michael Chen"]
        assert len(filter_submissions(apps, availability="all")) == 3

    def test_filters_keep_order(self, records):
        apps, _ = records
        assert filter_submissions(apps) == apps
