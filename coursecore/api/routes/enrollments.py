from uuid import UUID

from fastapi import APIRouter
from fastapi import status as http_status
from fastapi.responses import JSONResponse

from coursecore.api.deps import Context, CurrentPrincipal
from coursecore.api.responses import respond
from coursecore.api.schemas import EnrollRequest
from coursecore.components.eligibility import CheckEligibilityInput, run_check
from coursecore.components.enrollment import (
    CompleteInput,
    EnrollInput,
    GetStatusInput,
    ListEnrolledInput,
    ListForCourseInput,
    UnenrollInput,
    run_complete,
    run_enroll,
    run_get_status,
    run_list_enrolled,
    run_list_for_course,
    run_unenroll,
)
from coursecore.domain.entities import EnrollmentStatus

router = APIRouter()


@router.get("/courses/{course_id}/eligibility")
def check_eligibility(
    course_id: UUID,
    actor: CurrentPrincipal,
    ctx: Context,
    student_id: UUID | None = None,
) -> JSONResponse:
    """Can the student (the caller by default) enroll now, and if not, why."""
    inp = CheckEligibilityInput(
        actor=actor, student_id=student_id or actor.id, course_id=course_id
    )
    return respond(run_check(inp, evaluator=ctx.eligibility))


@router.post("/courses/{course_id}/enrollments")
def enroll(
    course_id: UUID,
    actor: CurrentPrincipal,
    ctx: Context,
    req: EnrollRequest | None = None,
) -> JSONResponse:
    student_id = req.student_id if req and req.student_id else actor.id
    inp = EnrollInput(actor=actor, student_id=student_id, course_id=course_id)
    return respond(run_enroll(inp, ledger=ctx.ledger), http_status.HTTP_201_CREATED)


@router.get("/courses/{course_id}/enrollments")
def list_for_course(course_id: UUID, actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    """Full roster for owners/admins; the caller's own record for students."""
    inp = ListForCourseInput(actor=actor, course_id=course_id)
    return respond(run_list_for_course(inp, ledger=ctx.ledger))


@router.get("/courses/{course_id}/enrollments/{student_id}")
def get_status(
    course_id: UUID, student_id: UUID, actor: CurrentPrincipal, ctx: Context
) -> JSONResponse:
    inp = GetStatusInput(actor=actor, student_id=student_id, course_id=course_id)
    return respond(run_get_status(inp, ledger=ctx.ledger))


@router.delete("/courses/{course_id}/enrollments/{student_id}")
def unenroll(
    course_id: UUID, student_id: UUID, actor: CurrentPrincipal, ctx: Context
) -> JSONResponse:
    inp = UnenrollInput(actor=actor, student_id=student_id, course_id=course_id)
    return respond(run_unenroll(inp, ledger=ctx.ledger))


@router.post("/courses/{course_id}/enrollments/{student_id}/complete")
def complete(
    course_id: UUID, student_id: UUID, actor: CurrentPrincipal, ctx: Context
) -> JSONResponse:
    inp = CompleteInput(actor=actor, student_id=student_id, course_id=course_id)
    return respond(run_complete(inp, ledger=ctx.ledger))


@router.get("/students/{student_id}/enrollments")
def list_enrolled(
    student_id: UUID,
    actor: CurrentPrincipal,
    ctx: Context,
    status: EnrollmentStatus | None = None,
) -> JSONResponse:
    inp = ListEnrolledInput(actor=actor, student_id=student_id, status=status)
    return respond(run_list_enrolled(inp, ledger=ctx.ledger))
