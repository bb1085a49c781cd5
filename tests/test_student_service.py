"""Student workflows: applying, accepting a placement, withdrawals."""

import pytest

from app.core.errors import (
    BusinessRule,
    BusinessRuleError,
    PartialPersistenceError,
    PersistenceError,
    ResourceNotFoundError,
    UnauthorizedError,
)
from app.models.entities import ApplicationStatus, ApprovalStatus, InternshipStatus
from app.services.student_service import AUTO_WITHDRAW_COMMENT

from conftest import FIXED_NOW, REP_ID, TODAY


def approve(container, application_id):
    return container.representatives.decide_application(REP_ID, application_id, approve=True)


def rule_of(excinfo):
    return excinfo.value.rule


# ============================================================
# APPLYING
# ============================================================

def test_apply_creates_pending_application(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")

    assert application.status == ApplicationStatus.PENDING
    assert application.submission_date == FIXED_NOW
    assert application.application_id.startswith("APP-")
    assert seeded.repositories.students.find_by_id("U001").application_ids == [application.application_id]
    assert seeded.students.active_application_count("U001") == 1


def test_year_one_student_cannot_apply_to_intermediate(seeded):
    with pytest.raises(BusinessRuleError) as info:
        seeded.students.apply("U002", "INT-INTER")
    assert rule_of(info) == BusinessRule.INELIGIBLE_LEVEL
    assert seeded.repositories.applications.count() == 0


def test_major_must_match_unless_any(seeded):
    with pytest.raises(BusinessRuleError) as info:
        seeded.students.apply("U003", "INT-INTER")
    assert rule_of(info) == BusinessRule.INELIGIBLE_MAJOR


def test_duplicate_application_rejected(seeded):
    seeded.students.apply("U001", "INT-BASIC")
    with pytest.raises(BusinessRuleError) as info:
        seeded.students.apply("U001", "INT-BASIC")
    assert rule_of(info) == BusinessRule.DUPLICATE_APPLICATION


def test_at_most_three_active_applications(seeded, make_internship):
    seeded.repositories.internships.save(make_internship("INT-FOURTH"))
    for internship_id in ("INT-BASIC", "INT-OTHER", "INT-EXTRA"):
        seeded.students.apply("U001", internship_id)

    with pytest.raises(BusinessRuleError) as info:
        seeded.students.apply("U001", "INT-FOURTH")

    assert rule_of(info) == BusinessRule.MAX_ACTIVE_APPLICATIONS
    assert seeded.students.active_application_count("U001") == 3


def test_unsuccessful_applications_free_up_the_cap(seeded, make_internship):
    seeded.repositories.internships.save(make_internship("INT-FOURTH"))
    first = seeded.students.apply("U001", "INT-BASIC")
    seeded.students.apply("U001", "INT-OTHER")
    seeded.students.apply("U001", "INT-EXTRA")

    seeded.representatives.decide_application(REP_ID, first.application_id, approve=False)

    assert seeded.students.apply("U001", "INT-FOURTH").status == ApplicationStatus.PENDING


@pytest.mark.parametrize("overrides", [
    {"visible": False},
    {"status": InternshipStatus.PENDING},
    {"opening_date": TODAY.replace(day=11)},
    {"closing_date": TODAY.replace(day=9)},
    {"filled_slots": 1},
])
def test_internship_must_be_accepting_applications(seeded, make_internship, overrides):
    seeded.repositories.internships.save(make_internship("INT-CLOSED", **overrides))
    with pytest.raises(BusinessRuleError) as info:
        seeded.students.apply("U001", "INT-CLOSED")
    assert rule_of(info) == BusinessRule.INTERNSHIP_NOT_OPEN


def test_apply_to_unknown_internship(seeded):
    with pytest.raises(ResourceNotFoundError):
        seeded.students.apply("U001", "INT-NOPE")


def test_available_internships_respect_eligibility(seeded):
    year_one = {i.internship_id for i in seeded.students.view_available_internships("U002")}
    eee = {i.internship_id for i in seeded.students.view_available_internships("U003")}

    assert year_one == {"INT-BASIC", "INT-OTHER", "INT-EXTRA"}
    assert "INT-INTER" not in eee
    assert "INT-BASIC" in eee


# ============================================================
# ACCEPTING A PLACEMENT
# ============================================================

def test_accept_flow_fills_single_slot_internship(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    assert approve(seeded, application.application_id).status == ApplicationStatus.SUCCESSFUL

    accepted = seeded.students.accept_placement("U001", application.application_id)

    assert accepted.status == ApplicationStatus.ACCEPTED
    assert accepted.placement_accepted is True
    assert accepted.placement_acceptance_date == FIXED_NOW

    internship = seeded.repositories.internships.find_by_id("INT-BASIC")
    assert (internship.filled_slots, internship.total_slots) == (1, 1)
    assert internship.status == InternshipStatus.FILLED
    assert "INT-BASIC" not in {i.internship_id for i in seeded.students.view_available_internships("U003")}

    student = seeded.repositories.students.find_by_id("U001")
    assert student.accepted_placement_id == application.application_id
    assert student.has_accepted_placement


def test_accept_withdraws_other_active_applications(seeded):
    chosen = seeded.students.apply("U001", "INT-BASIC")
    other = seeded.students.apply("U001", "INT-OTHER")
    third = seeded.students.apply("U001", "INT-EXTRA")
    approve(seeded, chosen.application_id)
    approve(seeded, third.application_id)
    pending_request = seeded.students.request_withdrawal("U001", other.application_id, "Changed my mind")

    seeded.students.accept_placement("U001", chosen.application_id)

    applications = seeded.repositories.applications
    assert applications.find_by_id(other.application_id).status == ApplicationStatus.WITHDRAWN
    assert applications.find_by_id(third.application_id).status == ApplicationStatus.WITHDRAWN
    assert applications.count_active_by_student_id("U001") == 0

    cancelled = seeded.repositories.withdrawals.find_by_id(pending_request.withdrawal_id)
    assert cancelled.status == ApprovalStatus.CANCELLED
    assert cancelled.staff_comments == AUTO_WITHDRAW_COMMENT


def test_no_applications_after_accepting(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    approve(seeded, application.application_id)
    seeded.students.accept_placement("U001", application.application_id)

    with pytest.raises(BusinessRuleError) as info:
        seeded.students.apply("U001", "INT-OTHER")
    assert rule_of(info) == BusinessRule.PLACEMENT_ALREADY_ACCEPTED


def test_cannot_accept_pending_application(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    with pytest.raises(BusinessRuleError) as info:
        seeded.students.accept_placement("U001", application.application_id)
    assert rule_of(info) == BusinessRule.INVALID_STATUS_TRANSITION


def test_cannot_accept_with_pending_withdrawal(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    approve(seeded, application.application_id)
    seeded.students.request_withdrawal("U001", application.application_id, "Unsure")

    with pytest.raises(BusinessRuleError) as info:
        seeded.students.accept_placement("U001", application.application_id)
    assert rule_of(info) == BusinessRule.WITHDRAWAL_PENDING


def test_cannot_accept_someone_elses_offer(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    approve(seeded, application.application_id)
    with pytest.raises(UnauthorizedError):
        seeded.students.accept_placement("U003", application.application_id)


# ============================================================
# WITHDRAWALS
# ============================================================

def test_withdrawal_request_lifecycle(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    request = seeded.students.request_withdrawal("U001", application.application_id, "Found another offer")
    assert request.status == ApprovalStatus.PENDING
    assert request.internship_id == "INT-BASIC"

    with pytest.raises(BusinessRuleError) as info:
        seeded.students.request_withdrawal("U001", application.application_id, "Again")
    assert rule_of(info) == BusinessRule.WITHDRAWAL_PENDING

    updated = seeded.students.update_withdrawal_request("U001", request.withdrawal_id, "Relocating")
    assert updated.reason == "Relocating"

    cancelled = seeded.students.cancel_withdrawal_request("U001", request.withdrawal_id, "Staying after all")
    assert cancelled.status == ApprovalStatus.CANCELLED
    assert cancelled.processed_by == "U001"
    assert cancelled.staff_comments == "Cancelled by student. Reason: Staying after all"

    with pytest.raises(BusinessRuleError) as info:
        seeded.students.update_withdrawal_request("U001", request.withdrawal_id, "Too late")
    assert rule_of(info) == BusinessRule.ALREADY_PROCESSED

    # a cancelled request no longer blocks a new one
    again = seeded.students.request_withdrawal("U001", application.application_id, "Really leaving")
    assert again.status == ApprovalStatus.PENDING
    assert len(seeded.students.view_withdrawal_requests("U001")) == 2


def test_unsuccessful_application_is_not_withdrawable(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    seeded.representatives.decide_application(REP_ID, application.application_id, approve=False)

    with pytest.raises(BusinessRuleError) as info:
        seeded.students.request_withdrawal("U001", application.application_id, "n/a")
    assert rule_of(info) == BusinessRule.NOT_WITHDRAWABLE


def test_delete_withdrawal_only_by_owner_while_pending_or_rejected(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    request = seeded.students.request_withdrawal("U001", application.application_id, "Reason")

    with pytest.raises(UnauthorizedError):
        seeded.students.delete_withdrawal_request("U003", request.withdrawal_id)

    seeded.students.delete_withdrawal_request("U001", request.withdrawal_id)
    assert seeded.repositories.withdrawals.find_by_id(request.withdrawal_id) is None


def test_cancelled_withdrawal_cannot_be_deleted(seeded):
    application = seeded.students.apply("U001", "INT-BASIC")
    request = seeded.students.request_withdrawal("U001", application.application_id, "Reason")
    seeded.students.cancel_withdrawal_request("U001", request.withdrawal_id)

    with pytest.raises(BusinessRuleError) as info:
        seeded.students.delete_withdrawal_request("U001", request.withdrawal_id)
    assert rule_of(info) == BusinessRule.NOT_DELETABLE


# ============================================================
# PERSISTENCE FAILURES
# ============================================================

def _failing_write(entity_name):
    def _write(snapshot):
        raise PersistenceError(entity_name, None, f"cannot write {entity_name}")
    return _write


def test_failure_on_first_file_changes_nothing(seeded, monkeypatch):
    monkeypatch.setattr(seeded.repositories.students, "_write", _failing_write("students"))

    with pytest.raises(PersistenceError) as info:
        seeded.students.apply("U001", "INT-BASIC")

    assert not isinstance(info.value, PartialPersistenceError)
    assert seeded.repositories.applications.count() == 0
    assert seeded.repositories.students.find_by_id("U001").application_ids == []


def test_failure_on_later_file_reports_partial_update(seeded, monkeypatch):
    application = seeded.students.apply("U001", "INT-BASIC")
    approve(seeded, application.application_id)
    monkeypatch.setattr(seeded.repositories.applications, "_write", _failing_write("applications"))

    with pytest.raises(PartialPersistenceError) as info:
        seeded.students.accept_placement("U001", application.application_id)

    assert info.value.persisted == ["students", "internships"]
    assert info.value.failed == ["applications"]
    # persisted side is committed, failed side still shows the old state
    assert seeded.repositories.internships.find_by_id("INT-BASIC").filled_slots == 1
    assert seeded.repositories.applications.find_by_id(application.application_id).status == ApplicationStatus.SUCCESSFUL
