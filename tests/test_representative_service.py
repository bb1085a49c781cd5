"""Representative workflows: posting internships and deciding applications."""

from datetime import timedelta

import pytest

from app.core.errors import BusinessRule, BusinessRuleError, InvalidInputError, UnauthorizedError
from app.models.entities import ApplicationStatus, InternshipLevel, InternshipStatus

from conftest import PENDING_REP_ID, REP_ID, TODAY


def posting(**overrides):
    values = dict(
        title="Backend Intern",
        description="APIs and storage",
        level=InternshipLevel.INTERMEDIATE,
        preferred_major="CS",
        opening_date=TODAY,
        closing_date=TODAY + timedelta(days=14),
        start_date=TODAY + timedelta(days=30),
        end_date=TODAY + timedelta(days=90),
        total_slots=2,
    )
    values.update(overrides)
    return values


# ============================================================
# CREATE
# ============================================================

def test_create_internship_starts_pending_and_hidden(seeded):
    rep_id = "new@acme.com"
    seeded.staff.create_representative("STAFF001", "New Rep", rep_id, "secret9", "Acme")

    internship = seeded.representatives.create_internship(rep_id, **posting())

    assert internship.status == InternshipStatus.PENDING
    assert internship.visible is False
    assert internship.company_name == "Acme"
    assert internship.internship_id.startswith("INT-")
    assert seeded.repositories.representatives.find_by_id(rep_id).internship_ids == [internship.internship_id]


def test_sixth_internship_is_rejected(seeded):
    seeded.representatives.create_internship(REP_ID, **posting(title="Fifth"))

    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.create_internship(REP_ID, **posting(title="Sixth"))

    assert info.value.rule == BusinessRule.MAX_INTERNSHIPS
    assert len(seeded.representatives.view_my_internships(REP_ID)) == 5


def test_unapproved_representative_cannot_post(seeded):
    with pytest.raises(UnauthorizedError):
        seeded.representatives.create_internship(PENDING_REP_ID, **posting())


@pytest.mark.parametrize("total_slots", [0, 11])
def test_slots_must_be_between_one_and_ten(seeded, total_slots):
    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.create_internship(REP_ID, **posting(total_slots=total_slots))
    assert info.value.rule == BusinessRule.INVALID_SLOTS


@pytest.mark.parametrize("dates", [
    {"closing_date": TODAY},                                  # opening == closing
    {"start_date": TODAY + timedelta(days=7)},                # start before closing
    {"end_date": TODAY + timedelta(days=30)},                 # end == start
])
def test_dates_must_be_ordered(seeded, dates):
    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.create_internship(REP_ID, **posting(**dates))
    assert info.value.rule == BusinessRule.INVALID_DATE_ORDER


def test_closing_may_equal_start(seeded):
    internship = seeded.representatives.create_internship(
        REP_ID, **posting(start_date=TODAY + timedelta(days=14))
    )
    assert internship.start_date == internship.closing_date


def test_title_is_required(seeded):
    with pytest.raises(InvalidInputError):
        seeded.representatives.create_internship(REP_ID, **posting(title="  "))


# ============================================================
# UPDATE / DELETE / VISIBILITY
# ============================================================

def test_editing_rejected_internship_returns_it_to_pending(seeded, make_internship):
    seeded.repositories.internships.save(make_internship("INT-REJ", status=InternshipStatus.REJECTED, visible=False))

    updated = seeded.representatives.update_internship(REP_ID, "INT-REJ", {"title": "Better title", "total_slots": 3})

    assert updated.status == InternshipStatus.PENDING
    assert updated.title == "Better title"
    assert seeded.repositories.internships.find_by_id("INT-REJ").total_slots == 3


def test_update_can_clear_description(seeded, make_internship):
    seeded.repositories.internships.save(make_internship("INT-D", status=InternshipStatus.PENDING))
    seeded.representatives.update_internship(REP_ID, "INT-D", {"description": "Paid, hybrid"})

    cleared = seeded.representatives.update_internship(REP_ID, "INT-D", {"description": None})

    assert cleared.description == ""
    assert seeded.repositories.internships.find_by_id("INT-D").description == ""


@pytest.mark.parametrize("changes", [
    {"level": "EXPERT"},
    {"total_slots": "many"},
    {"title": None},
])
def test_update_values_are_validated(seeded, make_internship, changes):
    seeded.repositories.internships.save(make_internship("INT-V", status=InternshipStatus.PENDING, title="Kept"))

    with pytest.raises(InvalidInputError):
        seeded.representatives.update_internship(REP_ID, "INT-V", changes)
    assert seeded.repositories.internships.find_by_id("INT-V").title == "Kept"


def test_approved_internship_is_not_editable(seeded):
    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.update_internship(REP_ID, "INT-BASIC", {"title": "Nope"})
    assert info.value.rule == BusinessRule.NOT_EDITABLE


def test_update_rejects_unknown_fields(seeded, make_internship):
    seeded.repositories.internships.save(make_internship("INT-P", status=InternshipStatus.PENDING))
    with pytest.raises(InvalidInputError):
        seeded.representatives.update_internship(REP_ID, "INT-P", {"filled_slots": 5})


def test_only_owner_may_edit(seeded, make_internship):
    seeded.repositories.internships.save(
        make_internship("INT-THEIRS", status=InternshipStatus.PENDING, representative_id="someone@else.com")
    )
    with pytest.raises(UnauthorizedError):
        seeded.representatives.update_internship(REP_ID, "INT-THEIRS", {"title": "Mine now"})


def test_delete_rules(seeded, make_internship):
    internships = seeded.repositories.internships
    internships.save(make_internship("INT-PAST", closing_date=TODAY - timedelta(days=1),
                                     opening_date=TODAY - timedelta(days=20)))

    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.delete_internship(REP_ID, "INT-BASIC")
    assert info.value.rule == BusinessRule.NOT_DELETABLE

    seeded.representatives.delete_internship(REP_ID, "INT-PAST")
    assert internships.find_by_id("INT-PAST") is None

    draft = seeded.representatives.create_internship(REP_ID, **posting())
    assert draft.internship_id in seeded.repositories.representatives.find_by_id(REP_ID).internship_ids
    seeded.representatives.delete_internship(REP_ID, draft.internship_id)
    assert draft.internship_id not in seeded.repositories.representatives.find_by_id(REP_ID).internship_ids


def test_visibility_toggle(seeded, make_internship):
    hidden = seeded.representatives.set_visibility(REP_ID, "INT-BASIC", False)
    assert hidden.visible is False
    assert "INT-BASIC" not in {i.internship_id for i in seeded.students.view_available_internships("U001")}

    seeded.repositories.internships.save(make_internship("INT-NEW", status=InternshipStatus.PENDING))
    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.set_visibility(REP_ID, "INT-NEW", True)
    assert info.value.rule == BusinessRule.INVALID_STATUS_TRANSITION


# ============================================================
# APPLICATION DECISIONS
# ============================================================

def test_decide_application(seeded):
    first = seeded.students.apply("U001", "INT-OTHER")
    second = seeded.students.apply("U003", "INT-OTHER")

    ok = seeded.representatives.decide_application(REP_ID, first.application_id, True, "Welcome")
    no = seeded.representatives.decide_application(REP_ID, second.application_id, False)

    assert ok.status == ApplicationStatus.SUCCESSFUL
    assert ok.representative_comments == "Welcome"
    assert no.status == ApplicationStatus.UNSUCCESSFUL
    # approval alone does not consume a slot
    assert seeded.repositories.internships.find_by_id("INT-OTHER").filled_slots == 0

    listed = seeded.representatives.view_applications_for_internship(REP_ID, "INT-OTHER")
    assert {a.application_id for a in listed} == {first.application_id, second.application_id}


def test_decided_application_cannot_be_decided_again(seeded):
    application = seeded.students.apply("U001", "INT-OTHER")
    seeded.representatives.decide_application(REP_ID, application.application_id, True)

    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.decide_application(REP_ID, application.application_id, False)
    assert info.value.rule == BusinessRule.INVALID_STATUS_TRANSITION


def test_approval_needs_free_slot(seeded):
    first = seeded.students.apply("U001", "INT-BASIC")
    second = seeded.students.apply("U003", "INT-BASIC")
    seeded.representatives.decide_application(REP_ID, first.application_id, True)
    seeded.students.accept_placement("U001", first.application_id)

    with pytest.raises(BusinessRuleError) as info:
        seeded.representatives.decide_application(REP_ID, second.application_id, True)
    assert info.value.rule == BusinessRule.NO_SLOTS


def test_other_representatives_cannot_decide(seeded):
    application = seeded.students.apply("U001", "INT-OTHER")
    with pytest.raises(UnauthorizedError):
        seeded.representatives.decide_application(PENDING_REP_ID, application.application_id, True)
