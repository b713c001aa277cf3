"""
Courses component - course records and lifecycle state machine.
"""

from ._impl import CourseRegistry
from .component import (
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
from .models import (
    PATCHABLE_FIELDS,
    SORT_FIELDS,
    ArchiveCourseInput,
    CourseSearchOutput,
    CreateCourseInput,
    DeleteCourseInput,
    GetCourseInput,
    GetPrerequisitesInput,
    ListCategoriesInput,
    PrerequisitesOutput,
    PublishCourseInput,
    SearchCoursesInput,
    UpdateCourseInput,
)
from .ports import CompletionReaderPort, CourseRepoPort, TimePort

__all__ = [
    # Entry points
    "run_archive",
    "run_create",
    "run_delete",
    "run_get",
    "run_get_prerequisites",
    "run_list_categories",
    "run_list_levels",
    "run_publish",
    "run_search",
    "run_update",
    # Service
    "CourseRegistry",
    # Input models
    "ArchiveCourseInput",
    "CreateCourseInput",
    "DeleteCourseInput",
    "GetCourseInput",
    "GetPrerequisitesInput",
    "ListCategoriesInput",
    "PublishCourseInput",
    "SearchCoursesInput",
    "UpdateCourseInput",
    # Output models
    "CourseSearchOutput",
    "PrerequisitesOutput",
    # Constants
    "PATCHABLE_FIELDS",
    "SORT_FIELDS",
    # Ports
    "CompletionReaderPort",
    "CourseRepoPort",
    "TimePort",
]
