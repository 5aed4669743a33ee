import pytest
from pydantic import ValidationError as SchemaError

from wellness.core.errors import ValidationError
from wellness.models.assessment import (
    AssessmentSubmission,
    GeneralRegion,
    MiddleEastRegion,
    region_from_wire,
    validate_submission,
)


def test_region_variants_from_wire():
    assert region_from_wire("North") == GeneralRegion(name="North")
    assert region_from_wire("Middle East", "Oman") == MiddleEastRegion(country="Oman")

    with pytest.raises(ValidationError):
        region_from_wire("Middle East")
    with pytest.raises(ValidationError):
        region_from_wire("South", "Oman")


def test_general_region_cannot_claim_middle_east():
    with pytest.raises(SchemaError):
        GeneralRegion(name="Middle East")


def test_wire_form_only_carries_country_for_middle_east(submission_factory):
    flat = submission_factory().to_wire()
    assert "middleEastCountry" not in flat
    assert flat["sleepHours"] == 6

    me = AssessmentSubmission(
        stage="Postpartum",
        region=MiddleEastRegion(country="Qatar"),
        sleep_hours=7,
        responses={},
    )
    assert me.to_wire()["region"] == "Middle East"
    assert me.to_wire()["middleEastCountry"] == "Qatar"
    assert AssessmentSubmission.from_wire(me.to_wire()) == me


def test_answers_must_be_real_booleans():
    with pytest.raises(SchemaError):
        AssessmentSubmission.from_wire(
            {"stage": "Postpartum", "region": "North", "sleepHours": 6, "responses": {"q1": "yes"}}
        )


def test_validation_reports_every_problem(submission_factory):
    submission = AssessmentSubmission(
        stage="",
        region=GeneralRegion(name=""),
        sleep_hours=30,
        responses={"q1": True, "q42": False},
    )
    with pytest.raises(ValidationError) as exc_info:
        validate_submission(submission)
    message = str(exc_info.value)
    assert exc_info.value.missing == ["q2", "q3", "q4", "q5", "q6", "q7", "q8", "q9"]
    for fragment in ("q42", "sleepHours", "stage is required", "region is required"):
        assert fragment in message

    validate_submission(submission_factory())
