"""Tests for decoding marketplace records into entity models."""

import logging
from datetime import datetime, timezone

import pytest

from admin_console.exceptions import ValidationError
from admin_console.models.base import EPOCH, PartyRef, decode_records, parse_status
from admin_console.models.booking import ApprovalStage, Booking, BookingStatus, PaymentStatus
from admin_console.models.job import EmployerOfferTerms, Job, JobStatus, JobType, WorkerSeekingTerms
from admin_console.models.snapshot import Snapshot, merge_by_id
from admin_console.models.user import RatingBucket, User, UserRole, UserStatus

from factories import booking_raw, job_raw, make_booking, make_job, make_user, user_raw


class TestUser:
    def test_decodes_upstream_aliases(self):
        user = User.model_validate({
            "_id": 42,
            "fullName": "Nasima Akter",
            "type": "Employer",
            "status": "ACTIVE",
            "phoneNumber": "01700000000",
            "createdAt": "2026-10-01T08:00:00",
        })
        assert user.id == "42"
        assert user.role == UserRole.EMPLOYER
        assert user.status == UserStatus.ACTIVE
        assert user.display_name == "Nasima Akter"
        assert user.phone == "01700000000"
        assert user.created_at.tzinfo is not None

    def test_unknown_status_degrades_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            user = User.model_validate(user_raw("u1", status="banned"))
        assert user.status == UserStatus.UNKNOWN
        assert user.status_color == "gray"
        assert "unknown" in caplog.text

    def test_rating_defaults_and_buckets(self):
        assert make_user("u1").rating == 0
        assert make_user("u1", rating=None).rating_bucket == RatingBucket.UNRATED
        assert make_user("u1", rating=4.5).rating_bucket == RatingBucket.HIGH
        assert make_user("u1", rating=2).rating_bucket == RatingBucket.MEDIUM
        assert make_user("u1", rating=1.5).rating_bucket == RatingBucket.LOW
        assert make_user("u1", rating=-3).rating == 0

    def test_comma_separated_skills(self):
        user = make_user("u1", skills="masonry, painting,")
        assert user.skills == ["masonry", "painting"]

    def test_admin_flag(self):
        assert make_user("a1", role="admin").is_admin
        assert not make_user("u1").is_admin

    def test_status_colors(self):
        assert make_user("u1", status="pending").status_color == "orange"
        assert make_user("u1", status="active").status_color == "green"
        assert make_user("u1", status="suspended").status_color == "red"


class TestJob:
    def test_worker_seeking_terms(self):
        job = make_job("j1", job_type="worker", availability="weekends")
        assert job.type == JobType.WORKER_SEEKING
        assert isinstance(job.terms, WorkerSeekingTerms)
        assert job.terms.expected_salary == 500
        assert job.terms.budget_label == "Expected Salary"
        assert job.terms.skills == ["plumbing", "wiring"]

    def test_employer_offer_terms(self):
        job = make_job("j1", job_type="employer", applicants=["a", "b", "c"])
        assert job.type == JobType.EMPLOYER_POSTED
        assert isinstance(job.terms, EmployerOfferTerms)
        assert job.terms.offered_budget == 500
        assert job.terms.skills_label == "Required Skills"
        assert job.terms.applicant_count == 3

    def test_unknown_type_has_no_terms(self):
        job = make_job("j1", job_type="freelance")
        assert job.type == JobType.UNKNOWN
        assert job.terms is None

    def test_status_is_optional(self):
        assert make_job("j1").status is None
        assert make_job("j1", approved=True, status="closed").status == JobStatus.CLOSED

    def test_posted_by_accepts_bare_id(self):
        job = make_job("j1", postedBy="user-9")
        assert job.posted_by == PartyRef(id="user-9")
        assert job.poster_name == "Unknown"

    def test_completion_timestamp_prefers_completed_at(self):
        job = make_job("j1", completedAt="2026-10-18T10:00:00Z", updatedAt="2026-10-18T11:00:00Z")
        assert job.completion_timestamp == datetime(2026, 10, 18, 10, tzinfo=timezone.utc)
        assert make_job("j2", updatedAt="2026-10-18T11:00:00Z").completion_timestamp.hour == 11


class TestBooking:
    def test_effective_status_prefers_booking_status(self):
        booking = make_booking("b1", booking_status="approved", status="pending")
        assert booking.effective_status == BookingStatus.APPROVED
        assert booking.status_values == {BookingStatus.APPROVED, BookingStatus.PENDING}

    def test_effective_status_falls_back_to_legacy(self):
        booking = make_booking("b1", booking_status=None, status="accepted")
        assert booking.effective_status == BookingStatus.ACCEPTED
        assert booking.status_color == "orange"

    def test_references_from_flat_fields(self):
        booking = make_booking("b1", workerPhone="01811111111")
        assert booking.worker.id == "w-b1"
        assert booking.worker.name == "Karim"
        assert booking.worker.phone == "01811111111"
        assert booking.employer.name == "Salma"
        assert booking.title == "Booking job b1"

    def test_amount_fallbacks(self):
        assert make_booking("b1").amount == 1200
        raw = booking_raw("b2")
        del raw["totalAmount"]
        raw["agreedRate"] = 800
        assert Booking.model_validate(raw).amount == 800

    def test_location_fields(self):
        booking = make_booking("b1", location={"area": "Mirpur", "district": "Dhaka"})
        assert booking.area == "Mirpur"
        assert booking.district == "Dhaka"

    def test_missing_title(self):
        raw = booking_raw("b1")
        del raw["jobTitle"]
        assert Booking.model_validate(raw).title == "No Title"

    def test_approval_stage(self):
        assert make_booking("b1").approval_stage is None
        assert make_booking("b1", adminApproval=True).approval_stage == ApprovalStage.AWAITING_WORKER
        assert (
            make_booking("b1", adminApproval=True, workerApproval=True).approval_stage
            == ApprovalStage.FULLY_APPROVED
        )

    def test_payment_color(self):
        assert make_booking("b1", paymentStatus="paid").payment_color == "green"
        assert make_booking("b1", paymentStatus="refunded").payment_status == PaymentStatus.UNKNOWN


class TestDecoding:
    def test_parse_status_rejects_unknown(self):
        with pytest.raises(ValidationError):
            parse_status(UserStatus, "deleted")

    def test_decode_records_skips_records_without_id(self, caplog):
        with caplog.at_level(logging.WARNING):
            users = decode_records(User, [user_raw("u1"), {"name": "ghost"}, user_raw("u2")])
        assert [u.id for u in users] == ["u1", "u2"]
        assert "Skipping" in caplog.text

    def test_undated_records_sort_oldest(self):
        assert make_user("u1", createdAt=None).sort_timestamp == EPOCH


class TestSnapshot:
    def test_merge_keeps_first_record_per_id(self):
        first = make_user("u1", status="active")
        dup = make_user("u1", status="pending")
        merged = merge_by_id([first], [dup, make_user("u2")])
        assert [u.id for u in merged] == ["u1", "u2"]
        assert merged[0].status == UserStatus.ACTIVE

    def test_with_entity_and_without(self):
        snapshot = Snapshot.from_lists(users=[make_user("u1"), make_user("u2")], sequence=1)
        updated = snapshot.with_entity("user", make_user("u1", status="active"), sequence=2)
        assert updated.find("user", "u1").status == UserStatus.ACTIVE
        assert snapshot.find("user", "u1").status == UserStatus.PENDING
        assert updated.sequence == 2

        removed = updated.without("user", "u2", sequence=3)
        assert removed.find("user", "u2") is None
        assert len(updated.users) == 2

    def test_views(self):
        snapshot = Snapshot.from_lists(
            users=[make_user("a1", role="admin", status="active"), make_user("u1")],
            jobs=[make_job("j1"), make_job("j2", approved=True, status="active")],
        )
        assert [u.id for u in snapshot.moderated_users] == ["u1"]
        assert [j.id for j in snapshot.pending_jobs] == ["j1"]
        assert [j.id for j in snapshot.approved_jobs] == ["j2"]
        assert snapshot.find("job", "missing") is None

    def test_snapshot_is_immutable(self):
        snapshot = Snapshot.from_lists(users=[make_user("u1")])
        with pytest.raises(AttributeError):
            snapshot.users = ()

    def test_job_raw_defaults(self):
        job = Job.model_validate(job_raw("j1"))
        assert job.collection == "pendingjobs"
        assert not job.is_approved
