# wellness/routes/questionnaire.py
from fastapi import APIRouter, Depends, Response, status
from ..core.deps import current_db, current_user
from ..models.assessment import AssessmentRecord, AssessmentRepo, AssessmentStats, SubmissionIn

router = APIRouter()


@router.post(
    "",
    response_model=AssessmentRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Submit and score a screening questionnaire",
)
async def submit(payload: SubmissionIn, db=Depends(current_db), user=Depends(current_user)):
    stored = await AssessmentRepo(db).put(user["sub"], payload.to_submission())
    return stored.to_record()


@router.get("", response_model=list[AssessmentRecord], summary="Active history, most recent first")
async def list_active(db=Depends(current_db), user=Depends(current_user)):
    rows = await AssessmentRepo(db).list_active(user["sub"])
    return [r.to_record() for r in rows]


@router.get("/stats", response_model=AssessmentStats, summary="Totals by risk label")
async def stats(db=Depends(current_db), user=Depends(current_user)):
    return await AssessmentRepo(db).stats(user["sub"])


@router.get("/{assessment_id}", response_model=AssessmentRecord, summary="One assessment")
async def get_one(assessment_id: str, db=Depends(current_db), user=Depends(current_user)):
    stored = await AssessmentRepo(db).get(user["sub"], assessment_id)
    return stored.to_record()


@router.delete(
    "/{assessment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Soft-delete an assessment (idempotent)",
)
async def delete(assessment_id: str, db=Depends(current_db), user=Depends(current_user)):
    await AssessmentRepo(db).soft_delete(user["sub"], assessment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
