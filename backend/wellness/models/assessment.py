# wellness/models/assessment.py
"""
Screening assessment schemas and the per-owner response store (repo).
Scoring itself lives in services.risk_model so it can be tested without Mongo.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Iterable, List, Literal, Mapping, Optional, Union

from anyio import to_thread
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

from ..core.errors import NotFoundError, ValidationError
from ..services.risk_model import POSSIBLE_RISK, QUESTION_IDS, RiskLabel, ScoredResult, score

log = logging.getLogger(__name__)

STAGES = ("First Trimester", "Second Trimester", "Third Trimester", "Postpartum")

MIDDLE_EAST = "Middle East"
REGIONS = ("North", "South", "East", "West", "Central", MIDDLE_EAST)


# ---------- Region ----------
class GeneralRegion(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["general"] = "general"
    name: str

    @field_validator("name")
    @classmethod
    def _not_middle_east(cls, v: str) -> str:
        if v.strip() == MIDDLE_EAST:
            raise ValueError("use MiddleEastRegion for the Middle East")
        return v.strip()

    @property
    def country(self) -> Optional[str]:
        return None


class MiddleEastRegion(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["middle_east"] = "middle_east"
    country: str = Field(min_length=1)

    @property
    def name(self) -> str:
        return MIDDLE_EAST


Region = Annotated[Union[GeneralRegion, MiddleEastRegion], Field(discriminator="kind")]


def region_from_wire(region: Optional[str], country: Optional[str] = None) -> Region:
    """Builds the region variant from the flat `region` / `middleEastCountry` pair."""
    name = (region or "").strip()
    country = (country or "").strip() or None
    if name == MIDDLE_EAST:
        if not country:
            raise ValidationError("middleEastCountry is required when region is Middle East")
        return MiddleEastRegion(country=country)
    if country:
        raise ValidationError("middleEastCountry is only allowed when region is Middle East")
    return GeneralRegion(name=name)


# ---------- Pydantic ----------
class AssessmentSubmission(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: str
    region: Region
    sleep_hours: float
    responses: Dict[str, StrictBool] = Field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "stage": self.stage,
            "region": self.region.name,
            "sleepHours": self.sleep_hours,
            "responses": dict(self.responses),
        }
        if self.region.country:
            out["middleEastCountry"] = self.region.country
        return out

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "AssessmentSubmission":
        return SubmissionIn.model_validate(data).to_submission()


class SubmissionIn(BaseModel):
    """Request body of POST /api/questionnaire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    stage: str = ""
    region: str = ""
    middle_east_country: Optional[str] = None
    sleep_hours: float
    responses: Dict[str, StrictBool] = Field(default_factory=dict)

    def to_submission(self) -> AssessmentSubmission:
        return AssessmentSubmission(
            stage=self.stage.strip(),
            region=region_from_wire(self.region, self.middle_east_country),
            sleep_hours=self.sleep_hours,
            responses=self.responses,
        )


class AssessmentRecord(BaseModel):
    """Wire shape of a stored assessment (server responses, client history)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    id: str
    created_at: datetime
    stage: str
    region: str
    middle_east_country: Optional[str] = None
    sleep_hours: float
    responses: Dict[str, bool] = Field(default_factory=dict)
    score: int
    max_score: int
    threshold: int
    label: RiskLabel
    risk_factors: List[str] = Field(default_factory=list)
    breakdown: Dict[str, int] = Field(default_factory=dict)
    model_version: str

    @property
    def is_risk(self) -> bool:
        return self.label == POSSIBLE_RISK


class StoredAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: str
    created_at: datetime
    submission: AssessmentSubmission
    result: ScoredResult
    deleted: bool = False

    def to_record(self) -> AssessmentRecord:
        return AssessmentRecord(
            id=self.id,
            created_at=self.created_at,
            stage=self.submission.stage,
            region=self.submission.region.name,
            middle_east_country=self.submission.region.country,
            sleep_hours=self.submission.sleep_hours,
            responses=dict(self.submission.responses),
            score=self.result.score,
            max_score=self.result.max_score,
            threshold=self.result.threshold,
            label=self.result.label,
            risk_factors=list(self.result.risk_factors),
            breakdown=dict(self.result.breakdown),
            model_version=self.result.model_version,
        )


class QueuedSubmission(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    submission: AssessmentSubmission
    queued_at: datetime
    # None when queued while signed out; such items go to the next signed-in user
    owner_id: Optional[str] = None


class AssessmentStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    risk_count: int = 0
    low_risk_count: int = 0

    @classmethod
    def from_records(cls, records: Iterable[AssessmentRecord]) -> "AssessmentStats":
        records = list(records)
        risk = sum(1 for r in records if r.is_risk)
        return cls(total=len(records), risk_count=risk, low_risk_count=len(records) - risk)


def validate_submission(submission: AssessmentSubmission) -> None:
    """
    Authoritative acceptance rules. Every problem is reported at once;
    `missing` on the error lists the unanswered question ids.
    """
    problems: List[str] = []
    missing = [qid for qid in QUESTION_IDS if qid not in submission.responses]
    unknown = sorted(set(submission.responses) - set(QUESTION_IDS))

    if missing:
        problems.append(f"missing answers for: {', '.join(missing)}")
    if unknown:
        problems.append(f"unknown questions: {', '.join(unknown)}")
    if not 0 <= submission.sleep_hours <= 24:
        problems.append("sleepHours must be between 0 and 24")
    if not submission.stage.strip():
        problems.append("stage is required")
    elif submission.stage not in STAGES:
        problems.append(f"stage must be one of: {', '.join(STAGES)}")
    if not submission.region.name.strip():
        problems.append("region is required")

    if problems:
        raise ValidationError("; ".join(problems), missing=missing)


# ---------- helpers ----------
def _utcnow() -> datetime:
    # Mongo keeps milliseconds; truncate so the returned record matches later reads
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _oid(assessment_id: str) -> ObjectId:
    try:
        return ObjectId(assessment_id)
    except (InvalidId, TypeError):
        raise NotFoundError(f"assessment {assessment_id} not found") from None


def _active(owner_id: str) -> Dict[str, Any]:
    return {"owner_id": owner_id, "deleted": {"$ne": True}}


def _from_doc(doc: Mapping[str, Any]) -> StoredAssessment:
    country = doc.get("middle_east_country")
    submission = AssessmentSubmission(
        stage=doc["stage"],
        region=MiddleEastRegion(country=country) if doc["region"] == MIDDLE_EAST else GeneralRegion(name=doc["region"]),
        sleep_hours=doc["sleep_hours"],
        responses=doc.get("responses") or {},
    )
    result = ScoredResult(
        score=doc["score"],
        max_score=doc["max_score"],
        threshold=doc["threshold"],
        label=doc["label"],
        risk_factors=tuple(doc.get("risk_factors") or ()),
        breakdown=doc.get("breakdown") or {},
        model_version=doc["model_version"],
    )
    return StoredAssessment(
        id=str(doc["_id"]),
        owner_id=doc["owner_id"],
        created_at=_as_utc(doc["created_at"]),
        submission=submission,
        result=result,
        deleted=bool(doc.get("deleted", False)),
    )


# ---------- Repo ----------
class AssessmentRepo:
    """
    Server-side store of scored assessments. Every query is scoped by owner;
    records are only ever soft-deleted.
    """

    def __init__(self, db) -> None:
        self.col = db["assessments"]

    async def put(self, owner_id: str, submission: AssessmentSubmission) -> StoredAssessment:
        validate_submission(submission)
        result = score(submission.responses)
        created_at = _utcnow()
        doc: Dict[str, Any] = {
            "owner_id": owner_id,
            "stage": submission.stage,
            "region": submission.region.name,
            "middle_east_country": submission.region.country,
            "sleep_hours": submission.sleep_hours,
            "responses": dict(submission.responses),
            "score": result.score,
            "max_score": result.max_score,
            "threshold": result.threshold,
            "label": result.label,
            "risk_factors": list(result.risk_factors),
            "breakdown": dict(result.breakdown),
            "model_version": result.model_version,
            "deleted": False,
            "deleted_at": None,
            "created_at": created_at.replace(tzinfo=None),
        }

        def _insert() -> str:
            res = self.col.insert_one(doc)
            return str(res.inserted_id)

        inserted_id = await to_thread.run_sync(_insert)
        log.info("stored assessment %s (%s, model %s)", inserted_id, result.label, result.model_version)
        return StoredAssessment(
            id=inserted_id,
            owner_id=owner_id,
            created_at=created_at,
            submission=submission,
            result=result,
        )

    async def list_active(self, owner_id: str) -> List[StoredAssessment]:
        def _fetch() -> List[StoredAssessment]:
            cur = self.col.find(_active(owner_id)).sort([("created_at", -1), ("_id", -1)])
            return [_from_doc(d) for d in cur]

        return await to_thread.run_sync(_fetch)

    async def get(self, owner_id: str, assessment_id: str) -> StoredAssessment:
        oid = _oid(assessment_id)

        def _find() -> Optional[Dict[str, Any]]:
            return self.col.find_one({"_id": oid, **_active(owner_id)})

        doc = await to_thread.run_sync(_find)
        if not doc:
            raise NotFoundError(f"assessment {assessment_id} not found")
        return _from_doc(doc)

    async def soft_delete(self, owner_id: str, assessment_id: str) -> None:
        """
        Marks the record deleted. Repeating the call on an already-deleted
        record of the same owner succeeds; unknown or foreign ids raise
        NotFoundError.
        """
        oid = _oid(assessment_id)

        def _mark() -> bool:
            res = self.col.update_one(
                {"_id": oid, **_active(owner_id)},
                {"$set": {"deleted": True, "deleted_at": _utcnow().replace(tzinfo=None)}},
            )
            if res.matched_count:
                return True
            return self.col.count_documents({"_id": oid, "owner_id": owner_id}, limit=1) > 0

        found = await to_thread.run_sync(_mark)
        if not found:
            raise NotFoundError(f"assessment {assessment_id} not found")
        log.info("soft-deleted assessment %s", assessment_id)

    async def stats(self, owner_id: str) -> AssessmentStats:
        def _count() -> AssessmentStats:
            total = self.col.count_documents(_active(owner_id))
            risk = self.col.count_documents({**_active(owner_id), "label": POSSIBLE_RISK})
            return AssessmentStats(total=total, risk_count=risk, low_risk_count=total - risk)

        return await to_thread.run_sync(_count)
