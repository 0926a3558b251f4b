"""Tests for the moderation rules engine."""

import pytest

from admin_console.exceptions import ValidationError
from admin_console.models.booking import BookingStatus, PaymentStatus
from admin_console.models.job import JobStatus
from admin_console.models.user import UserStatus
from admin_console.services.transitions import (
    Action,
    EntityType,
    available_actions,
    can_transition,
    is_booking_actionable,
    next_state,
    registered_actions,
    toggled_status,
)

from factories import make_booking, make_job, make_user


class TestUserRules:
    def test_approve_pending_then_second_approve_refused(self):
        user = make_user("u1", status="pending")
        result = next_state(EntityType.USER, user, Action.APPROVE)
        assert result.entity.status == UserStatus.ACTIVE
        assert user.status == UserStatus.PENDING

        decision = can_transition(EntityType.USER, result.entity, Action.APPROVE)
        assert not decision.allowed
        with pytest.raises(ValidationError):
            next_state(EntityType.USER, result.entity, Action.APPROVE)

    @pytest.mark.parametrize("status,action,allowed", [
        ("pending", Action.APPROVE, True),
        ("pending", Action.REJECT, True),
        ("pending", Action.SUSPEND, False),
        ("pending", Action.DELETE, True),
        ("active", Action.SUSPEND, True),
        ("active", Action.APPROVE, False),
        ("active", Action.DELETE, False),
        ("active", Action.ACTIVATE, False),
        ("suspended", Action.ACTIVATE, True),
        ("suspended", Action.DELETE, True),
        ("suspended", Action.REJECT, False),
    ])
    def test_status_guards(self, status, action, allowed):
        user = make_user("u1", status=status)
        assert can_transition(EntityType.USER, user, action).allowed is allowed

    def test_reject_and_delete_are_hard_deletes(self):
        user = make_user("u1", status="pending")
        assert next_state(EntityType.USER, user, Action.REJECT).deleted
        assert next_state(EntityType.USER, user, Action.DELETE).deleted

    def test_admins_cannot_be_moderated(self):
        admin = make_user("a1", role="admin", status="pending")
        for action in registered_actions(EntityType.USER):
            decision = can_transition(EntityType.USER, admin, action)
            assert not decision.allowed
            assert "Admin" in decision.reason

    def test_unknown_status_offers_nothing(self):
        user = make_user("u1", status="banned")
        assert available_actions(EntityType.USER, user) == []

    def test_available_actions_for_pending(self):
        user = make_user("u1", status="pending")
        assert set(available_actions(EntityType.USER, user)) == {Action.APPROVE, Action.REJECT, Action.DELETE}


class TestJobRules:
    def test_unapproved_job_offers_approve_and_delete(self):
        job = make_job("j1")
        assert set(available_actions(EntityType.JOB, job)) == {Action.APPROVE, Action.DELETE}
        assert not can_transition(EntityType.JOB, job, Action.TOGGLE_STATUS).allowed

    def test_approve_moves_collection_tag(self):
        job = make_job("j1")
        result = next_state(EntityType.JOB, job, Action.APPROVE, approved_collection="approvedjobs")
        assert result.entity.is_approved
        assert result.entity.collection == "approvedjobs"
        assert job.collection == "pendingjobs"

    def test_approve_is_one_way(self):
        approved = next_state(EntityType.JOB, make_job("j1"), Action.APPROVE).entity
        assert not can_transition(EntityType.JOB, approved, Action.APPROVE).allowed
        for action in available_actions(EntityType.JOB, approved):
            result = next_state(EntityType.JOB, approved, action)
            assert result.deleted or result.entity.is_approved

    def test_approve_leaves_status_untouched(self):
        result = next_state(EntityType.JOB, make_job("j1"), Action.APPROVE)
        assert result.entity.status is None

    @pytest.mark.parametrize("current,expected", [
        (JobStatus.ACTIVE, JobStatus.CLOSED),
        (JobStatus.CLOSED, JobStatus.ACTIVE),
        (JobStatus.COMPLETED, JobStatus.COMPLETED),
        (None, None),
    ])
    def test_toggled_status(self, current, expected):
        assert toggled_status(current) == expected

    def test_toggle_approved_job(self):
        job = make_job("j1", approved=True, status="active")
        assert next_state(EntityType.JOB, job, Action.TOGGLE_STATUS).entity.status == JobStatus.CLOSED

    @pytest.mark.parametrize("status", ["completed", None])
    def test_toggle_without_defined_change_is_not_offered(self, status):
        job = make_job("j1", approved=True, status=status)
        decision = can_transition(EntityType.JOB, job, Action.TOGGLE_STATUS)
        assert not decision.allowed
        assert "No status change is defined" in decision.reason
        assert Action.TOGGLE_STATUS not in available_actions(EntityType.JOB, job)
        assert available_actions(EntityType.JOB, job) == [Action.DELETE]

    def test_delete_always_allowed(self):
        assert next_state(EntityType.JOB, make_job("j1"), Action.DELETE).deleted
        assert next_state(EntityType.JOB, make_job("j2", approved=True, status="completed"), Action.DELETE).deleted


class TestBookingRules:
    @pytest.mark.parametrize("fields,actionable", [
        ({"booking_status": "pending"}, True),
        ({"booking_status": None, "status": "accepted"}, True),
        ({"booking_status": "pending", "status": "approved"}, False),
        ({"booking_status": "pending", "status": "rejected"}, False),
        ({"booking_status": "approved"}, False),
        ({"booking_status": "completed"}, False),
        ({"booking_status": None}, False),
    ])
    def test_actionable(self, fields, actionable):
        booking_status = fields.pop("booking_status")
        booking = make_booking("b1", booking_status=booking_status, **fields)
        assert is_booking_actionable(booking) is actionable

    def test_approval_flags_do_not_affect_actionable(self):
        booking = make_booking("b1", adminApproval=True, workerApproval=False)
        assert is_booking_actionable(booking)

    def test_approve_sets_status_notes_and_flag(self):
        booking = make_booking("b1")
        result = next_state(EntityType.BOOKING, booking, Action.APPROVE, {"admin_notes": "verified"})
        assert result.entity.booking_status == BookingStatus.APPROVED
        assert result.entity.admin_approval
        assert result.entity.admin_notes == "verified"
        assert not is_booking_actionable(result.entity)

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reject_requires_reason(self, reason):
        booking = make_booking("b1")
        decision = can_transition(EntityType.BOOKING, booking, Action.REJECT, {"rejection_reason": reason})
        assert not decision.allowed
        assert decision.reason == "Please provide a rejection reason"

    def test_reject_reason_checked_before_status(self):
        booking = make_booking("b1", booking_status="approved")
        decision = can_transition(EntityType.BOOKING, booking, Action.REJECT, {})
        assert decision.reason == "Please provide a rejection reason"

    def test_reject_records_reason(self):
        result = next_state(EntityType.BOOKING, make_booking("b1"), Action.REJECT, {"rejection_reason": "No show"})
        assert result.entity.booking_status == BookingStatus.REJECTED
        assert result.entity.rejection_reason == "No show"

    def test_update_payment(self):
        booking = make_booking("b1")
        result = next_state(EntityType.BOOKING, booking, Action.UPDATE_PAYMENT, {"payment_status": "paid"})
        assert result.entity.payment_status == PaymentStatus.PAID

    def test_update_payment_to_same_value_is_noop(self):
        booking = make_booking("b1", paymentStatus="paid")
        result = next_state(EntityType.BOOKING, booking, Action.UPDATE_PAYMENT, {"payment_status": "paid"})
        assert result.entity is booking

    @pytest.mark.parametrize("target", ["refunded", "unknown", None])
    def test_update_payment_rejects_bad_target(self, target):
        decision = can_transition(
            EntityType.BOOKING, make_booking("b1"), Action.UPDATE_PAYMENT, {"payment_status": target}
        )
        assert not decision.allowed

    def test_payment_offered_only_while_actionable(self):
        assert Action.UPDATE_PAYMENT in available_actions(EntityType.BOOKING, make_booking("b1"))
        settled = make_booking("b2", booking_status="approved")
        assert available_actions(EntityType.BOOKING, settled) == [Action.DELETE]


def test_unregistered_pair_is_refused():
    decision = can_transition(EntityType.USER, make_user("u1"), Action.TOGGLE_STATUS)
    assert not decision.allowed
