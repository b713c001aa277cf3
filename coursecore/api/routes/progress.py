from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from coursecore.api.deps import Context, CurrentPrincipal
from coursecore.api.responses import respond
from coursecore.api.schemas import ProgressUpdateRequest
from coursecore.components.progress import (
    GetProgressInput,
    UpdateProgressInput,
    run_get,
    run_update,
)

router = APIRouter()


@router.put("/courses/{course_id}/progress/{student_id}")
def update_progress(
    course_id: UUID,
    student_id: UUID,
    req: ProgressUpdateRequest,
    actor: CurrentPrincipal,
    ctx: Context,
) -> JSONResponse:
    inp = UpdateProgressInput(
        actor=actor,
        student_id=student_id,
        course_id=course_id,
        percentage=req.percentage,
        completed_modules=req.completed_modules,
    )
    return respond(run_update(inp, tracker=ctx.tracker))


@router.get("/courses/{course_id}/progress/{student_id}")
def get_progress(
    course_id: UUID, student_id: UUID, actor: CurrentPrincipal, ctx: Context
) -> JSONResponse:
    """A student's record; owners and admins also get the roster aggregate."""
    inp = GetProgressInput(actor=actor, student_id=student_id, course_id=course_id)
    return respond(run_get(inp, tracker=ctx.tracker))
