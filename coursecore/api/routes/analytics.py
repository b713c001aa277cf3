from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from coursecore.api.deps import Context, CurrentPrincipal
from coursecore.api.responses import respond
from coursecore.components.analytics import (
    CourseSummaryInput,
    PlatformStatsInput,
    run_course_summary,
    run_platform_stats,
)

router = APIRouter()


@router.get("/stats")
def platform_stats(actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    """Platform-wide enrollment, progress and feedback counts."""
    return respond(run_platform_stats(PlatformStatsInput(actor=actor), service=ctx.analytics))


@router.get("/courses/{course_id}")
def course_summary(course_id: UUID, actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    inp = CourseSummaryInput(actor=actor, course_id=course_id)
    return respond(run_course_summary(inp, service=ctx.analytics))
