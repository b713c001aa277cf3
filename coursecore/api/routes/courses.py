from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi import status as http_status
from fastapi.responses import JSONResponse

from coursecore.api.deps import Context, CurrentPrincipal
from coursecore.api.responses import respond
from coursecore.api.schemas import CourseCreateRequest, CourseUpdateRequest
from coursecore.components.courses import (
    ArchiveCourseInput,
    CreateCourseInput,
    DeleteCourseInput,
    GetCourseInput,
    GetPrerequisitesInput,
    ListCategoriesInput,
    PublishCourseInput,
    SearchCoursesInput,
    UpdateCourseInput,
    run_archive,
    run_create,
    run_delete,
    run_get,
    run_get_prerequisites,
    run_list_categories,
    run_list_levels,
    run_publish,
    run_search,
    run_update,
)

router = APIRouter()


@router.get("")
def search_courses(
    actor: CurrentPrincipal,
    ctx: Context,
    q: str | None = None,
    category: str | None = None,
    level: str | None = None,
    tags: Annotated[list[str] | None, Query()] = None,
    status: str | None = "published",
    instructor_id: UUID | None = None,
    min_credits: int | None = None,
    max_credits: int | None = None,
    has_available_spots: bool = False,
    limit: int | None = None,
    offset: int = 0,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> JSONResponse:
    """Search and list courses."""
    inp = SearchCoursesInput(
        actor=actor,
        text=q,
        category=category,
        level=level,
        tags=tags or [],
        status=None if status == "all" else status,
        instructor_id=instructor_id,
        min_credits=min_credits,
        max_credits=max_credits,
        has_available_spots=has_available_spots,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return respond(run_search(inp, registry=ctx.registry))


@router.get("/categories")
def list_categories(actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    inp = ListCategoriesInput(actor=actor)
    return respond(run_list_categories(inp, registry=ctx.registry))


@router.get("/levels")
def list_levels(actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    return respond(run_list_levels(registry=ctx.registry))


@router.post("")
def create_course(
    req: CourseCreateRequest, actor: CurrentPrincipal, ctx: Context
) -> JSONResponse:
    """Create a draft course."""
    inp = CreateCourseInput(actor=actor, **req.model_dump())
    return respond(run_create(inp, registry=ctx.registry), http_status.HTTP_201_CREATED)


@router.get("/{course_id}")
def get_course(course_id: UUID, actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    inp = GetCourseInput(actor=actor, course_id=course_id)
    return respond(run_get(inp, registry=ctx.registry))


@router.patch("/{course_id}")
def update_course(
    course_id: UUID, req: CourseUpdateRequest, actor: CurrentPrincipal, ctx: Context
) -> JSONResponse:
    inp = UpdateCourseInput(actor=actor, course_id=course_id, patch=req.to_patch())
    return respond(run_update(inp, registry=ctx.registry))


@router.post("/{course_id}/publish")
def publish_course(course_id: UUID, actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    inp = PublishCourseInput(actor=actor, course_id=course_id)
    return respond(run_publish(inp, registry=ctx.registry))


@router.post("/{course_id}/archive")
def archive_course(course_id: UUID, actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    inp = ArchiveCourseInput(actor=actor, course_id=course_id)
    return respond(run_archive(inp, registry=ctx.registry))


@router.delete("/{course_id}")
def delete_course(course_id: UUID, actor: CurrentPrincipal, ctx: Context) -> JSONResponse:
    inp = DeleteCourseInput(actor=actor, course_id=course_id)
    return respond(run_delete(inp, registry=ctx.registry))


@router.get("/{course_id}/prerequisites")
def get_prerequisites(
    course_id: UUID,
    actor: CurrentPrincipal,
    ctx: Context,
    student_id: UUID | None = None,
) -> JSONResponse:
    inp = GetPrerequisitesInput(actor=actor, course_id=course_id, student_id=student_id)
    return respond(run_get_prerequisites(inp, registry=ctx.registry))
