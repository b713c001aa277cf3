from uuid import UUID

from fastapi import APIRouter
from fastapi import status as http_status
from fastapi.responses import JSONResponse

from coursecore.api.deps import Context, CurrentPrincipal
from coursecore.api.responses import respond
from coursecore.api.schemas import FeedbackSubmitRequest
from coursecore.components.feedback import (
    GetFeedbackInput,
    SubmitFeedbackInput,
    run_get,
    run_submit,
)

router = APIRouter()


@router.post("/courses/{course_id}/feedback")
def submit_feedback(
    course_id: UUID, req: FeedbackSubmitRequest, actor: CurrentPrincipal, ctx: Context
) -> JSONResponse:
    inp = SubmitFeedbackInput(
        actor=actor,
        student_id=req.student_id or actor.id,
        course_id=course_id,
        rating=req.rating,
        comment=req.comment,
        categories=req.categories,
    )
    return respond(run_submit(inp, store=ctx.feedback), http_status.HTTP_201_CREATED)


@router.get("/courses/{course_id}/feedback")
def get_feedback(course_id: UUID, actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    inp = GetFeedbackInput(actor=actor, course_id=course_id)
    return respond(run_get(inp, store=ctx.feedback))
