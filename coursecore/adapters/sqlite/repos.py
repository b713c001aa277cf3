import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from coursecore.components.eligibility.models import EligibilitySnapshot
from coursecore.components.enrollment.models import AdmitOutcome
from coursecore.domain.entities import (
    Course,
    CourseStatus,
    Enrollment,
    EnrollmentStatus,
    Feedback,
    Progress,
)
from coursecore.domain.errors import ConflictError, DuplicateCodeError, ServiceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT = 5.0


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def fmt_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


@contextmanager
def storage_errors() -> Iterator[None]:
    """Translate lock/busy/IO failures into ServiceUnavailable."""
    try:
        yield
    except sqlite3.OperationalError as e:
        logger.warning("Storage operation failed: %s", e)
        raise ServiceUnavailable(f"Storage unavailable: {e}") from e


class _SQLiteRepo:
    def __init__(self, db_path: str, busy_timeout: float = DEFAULT_BUSY_TIMEOUT):
        self.db_path = db_path
        self.busy_timeout = busy_timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


# --- Courses ---

COURSE_SORT_COLUMNS = {
    "created_at": "created_at",
    "title": "title",
    "code": "code",
    "credits": "credits",
    "popularity": "enrolled_count",
}


def _row_to_course(row: dict[str, Any], prerequisites: list[UUID]) -> Course:
    return Course(
        id=UUID(row["id"]),
        code=row["code"],
        title=row["title"],
        description=row["description"],
        status=row["status"],
        capacity=row["capacity"],
        credits=row["credits"],
        instructor_id=UUID(row["instructor_id"]),
        prerequisites=prerequisites,
        schedule=row["schedule"],
        category=row["category"],
        level=row["level"],
        tags=json.loads(row["tags_json"]),
        enrollment_deadline=parse_dt(row["enrollment_deadline"]),
        enrolled_count=row["enrolled_count"],
        version=row["version"],
        created_at=parse_dt(row["created_at"]) or datetime.min,
        updated_at=parse_dt(row["updated_at"]) or datetime.min,
        published_at=parse_dt(row["published_at"]),
        deleted_at=parse_dt(row["deleted_at"]),
    )


class SQLiteCourseRepo(_SQLiteRepo):
    def _load_prerequisites(self, conn: sqlite3.Connection, course_id: str) -> list[UUID]:
        rows = conn.execute(
            "SELECT prerequisite_id FROM course_prerequisites "
            "WHERE course_id = ? ORDER BY prerequisite_id",
            (course_id,),
        ).fetchall()
        return [UUID(r["prerequisite_id"]) for r in rows]

    def _write_prerequisites(self, conn: sqlite3.Connection, course: Course) -> None:
        conn.execute("DELETE FROM course_prerequisites WHERE course_id = ?", (str(course.id),))
        for prereq_id in course.prerequisites:
            conn.execute(
                "INSERT INTO course_prerequisites (course_id, prerequisite_id) VALUES (?, ?)",
                (str(course.id), str(prereq_id)),
            )

    def insert(self, course: Course) -> Course:
        with storage_errors():
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO courses (
                        id, code, title, description, status, capacity, credits,
                        instructor_id, schedule, category, level, tags_json,
                        enrollment_deadline, enrolled_count, version,
                        created_at, updated_at, published_at, deleted_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, 1, ?, ?, ?, NULL)
                    """,
                    (
                        str(course.id),
                        course.code,
                        course.title,
                        course.description,
                        course.status,
                        course.capacity,
                        course.credits,
                        str(course.instructor_id),
                        course.schedule,
                        course.category,
                        course.level,
                        json.dumps(course.tags),
                        fmt_dt(course.enrollment_deadline),
                        fmt_dt(course.created_at),
                        fmt_dt(course.updated_at),
                        fmt_dt(course.published_at),
                    ),
                )
                self._write_prerequisites(conn, course)
                conn.commit()
                return course.model_copy(update={"enrolled_count": 0, "version": 1})
            except sqlite3.IntegrityError as e:
                conn.rollback()
                if "courses.code" in str(e):
                    raise DuplicateCodeError(course.code) from e
                raise
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def get_by_id(self, course_id: UUID, include_deleted: bool = False) -> Course | None:
        with storage_errors():
            conn = self._get_conn()
            try:
                query = "SELECT * FROM courses WHERE id = ?"
                if not include_deleted:
                    query += " AND deleted_at IS NULL"
                row = conn.execute(query, (str(course_id),)).fetchone()
                if not row:
                    return None
                return _row_to_course(row, self._load_prerequisites(conn, row["id"]))
            finally:
                conn.close()

    def get_by_code(self, code: str) -> Course | None:
        with storage_errors():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT * FROM courses WHERE code = ? AND deleted_at IS NULL", (code,)
                ).fetchone()
                if not row:
                    return None
                return _row_to_course(row, self._load_prerequisites(conn, row["id"]))
            finally:
                conn.close()

    def get_many(self, course_ids: list[UUID]) -> list[Course]:
        if not course_ids:
            return []
        with storage_errors():
            conn = self._get_conn()
            try:
                placeholders = ",".join("?" for _ in course_ids)
                rows = conn.execute(
                    f"SELECT * FROM courses WHERE id IN ({placeholders}) "
                    "AND deleted_at IS NULL ORDER BY code",
                    [str(cid) for cid in course_ids],
                ).fetchall()
                return [_row_to_course(r, self._load_prerequisites(conn, r["id"])) for r in rows]
            finally:
                conn.close()

    def update_fields(self, course: Course) -> bool:
        """
        Persist editable fields. The write only applies while the live active
        count still fits the new capacity; returns False otherwise.
        """
        with storage_errors():
            conn = self._get_conn()
            try:
                cursor = conn.execute(
                    """
                    UPDATE courses SET
                        code = ?, title = ?, description = ?, capacity = ?,
                        credits = ?, instructor_id = ?, schedule = ?, category = ?,
                        level = ?, tags_json = ?, enrollment_deadline = ?,
                        version = version + 1, updated_at = ?
                    WHERE id = ? AND deleted_at IS NULL AND enrolled_count <= ?
                    """,
                    (
                        course.code,
                        course.title,
                        course.description,
                        course.capacity,
                        course.credits,
                        str(course.instructor_id),
                        course.schedule,
                        course.category,
                        course.level,
                        json.dumps(course.tags),
                        fmt_dt(course.enrollment_deadline),
                        fmt_dt(course.updated_at),
                        str(course.id),
                        course.capacity,
                    ),
                )
                if cursor.rowcount != 1:
                    conn.rollback()
                    return False
                self._write_prerequisites(conn, course)
                conn.commit()
                return True
            except sqlite3.IntegrityError as e:
                conn.rollback()
                if "courses.code" in str(e):
                    raise DuplicateCodeError(course.code) from e
                raise
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def set_status(
        self,
        course_id: UUID,
        from_statuses: list[CourseStatus],
        to_status: CourseStatus,
        now: datetime,
        require_no_active: bool = False,
    ) -> bool:
        """Conditional lifecycle write; False if the guard no longer holds."""
        with storage_errors():
            conn = self._get_conn()
            try:
                placeholders = ",".join("?" for _ in from_statuses)
                query = (
                    "UPDATE courses SET status = ?, updated_at = ?, version = version + 1, "
                    "published_at = CASE WHEN ? = 'published' THEN ? ELSE published_at END "
                    f"WHERE id = ? AND deleted_at IS NULL AND status IN ({placeholders})"
                )
                if require_no_active:
                    query += " AND enrolled_count = 0"
                params: list[Any] = [to_status, fmt_dt(now), to_status, fmt_dt(now), str(course_id)]
                params.extend(from_statuses)
                cursor = conn.execute(query, params)
                conn.commit()
                return cursor.rowcount == 1
            finally:
                conn.close()

    def list_dependents(self, course_id: UUID) -> list[Course]:
        """Live courses that list course_id as a prerequisite."""
        with storage_errors():
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT c.* FROM courses c "
                    "JOIN course_prerequisites p ON p.course_id = c.id "
                    "WHERE p.prerequisite_id = ? AND c.deleted_at IS NULL ORDER BY c.code",
                    (str(course_id),),
                ).fetchall()
                return [_row_to_course(r, self._load_prerequisites(conn, r["id"])) for r in rows]
            finally:
                conn.close()

    def soft_delete(self, course_id: UUID, now: datetime) -> bool:
        with storage_errors():
            conn = self._get_conn()
            try:
                cursor = conn.execute(
                    "UPDATE courses SET deleted_at = ?, updated_at = ?, version = version + 1 "
                    "WHERE id = ? AND deleted_at IS NULL AND enrolled_count = 0 "
                    "AND NOT EXISTS (SELECT 1 FROM course_prerequisites p "
                    "JOIN courses c ON c.id = p.course_id "
                    "WHERE p.prerequisite_id = ? AND c.deleted_at IS NULL)",
                    (fmt_dt(now), fmt_dt(now), str(course_id), str(course_id)),
                )
                conn.commit()
                return cursor.rowcount == 1
            finally:
                conn.close()

    def search(
        self,
        *,
        text: str | None = None,
        category: str | None = None,
        level: str | None = None,
        statuses: list[CourseStatus] | None = None,
        tags: list[str] | None = None,
        instructor_id: UUID | None = None,
        min_credits: int | None = None,
        max_credits: int | None = None,
        has_available_spots: bool = False,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Course], int]:
        where = ["deleted_at IS NULL"]
        params: list[Any] = []

        if text and text.strip():
            like = f"%{text.strip()}%"
            where.append("(title LIKE ? OR description LIKE ? OR code LIKE ? OR tags_json LIKE ?)")
            params.extend([like, like, like, like])
        if category:
            where.append("category = ?")
            params.append(category)
        if level:
            where.append("level = ?")
            params.append(level)
        if tags:
            where.append(
                "EXISTS (SELECT 1 FROM json_each(courses.tags_json) "
                f"WHERE json_each.value IN ({','.join('?' for _ in tags)}))"
            )
            params.extend(tags)
        if statuses:
            where.append(f"status IN ({','.join('?' for _ in statuses)})")
            params.extend(statuses)
        if instructor_id:
            where.append("instructor_id = ?")
            params.append(str(instructor_id))
        if min_credits is not None:
            where.append("credits >= ?")
            params.append(min_credits)
        if max_credits is not None:
            where.append("credits <= ?")
            params.append(max_credits)
        if has_available_spots:
            where.append("enrolled_count < capacity")

        column = COURSE_SORT_COLUMNS.get(sort_by, "created_at")
        direction = "DESC" if sort_order == "desc" else "ASC"
        where_sql = " AND ".join(where)

        with storage_errors():
            conn = self._get_conn()
            try:
                total = conn.execute(
                    f"SELECT COUNT(*) AS n FROM courses WHERE {where_sql}", params
                ).fetchone()["n"]
                rows = conn.execute(
                    f"SELECT * FROM courses WHERE {where_sql} "
                    f"ORDER BY {column} {direction}, id ASC LIMIT ? OFFSET ?",
                    [*params, limit, offset],
                ).fetchall()
                courses = [_row_to_course(r, self._load_prerequisites(conn, r["id"])) for r in rows]
                return courses, total
            finally:
                conn.close()

    def list_categories(self) -> list[str]:
        with storage_errors():
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT DISTINCT category FROM courses "
                    "WHERE deleted_at IS NULL AND status = 'published' AND category != '' "
                    "ORDER BY category"
                ).fetchall()
                return [r["category"] for r in rows]
            finally:
                conn.close()

    def status_counts(self) -> dict[str, int]:
        with storage_errors():
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT status, COUNT(*) AS n FROM courses "
                    "WHERE deleted_at IS NULL GROUP BY status"
                ).fetchall()
                return {r["status"]: r["n"] for r in rows}
            finally:
                conn.close()

    def top_categories(self, limit: int = 5) -> list[tuple[str, int]]:
        with storage_errors():
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT category, COUNT(*) AS n FROM courses "
                    "WHERE deleted_at IS NULL AND status = 'published' AND category != '' "
                    "GROUP BY category ORDER BY n DESC, category ASC LIMIT ?",
                    (limit,),
                ).fetchall()
                return [(r["category"], r["n"]) for r in rows]
            finally:
                conn.close()


# --- Enrollments ---


def _row_to_enrollment(row: dict[str, Any]) -> Enrollment:
    return Enrollment(
        id=UUID(row["id"]),
        student_id=UUID(row["student_id"]),
        course_id=UUID(row["course_id"]),
        status=row["status"],
        enrolled_at=parse_dt(row["enrolled_at"]) or datetime.min,
        ended_at=parse_dt(row["ended_at"]),
    )


class SQLiteEnrollmentRepo(_SQLiteRepo):
    def get(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        with storage_errors():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT * FROM enrollments WHERE student_id = ? AND course_id = ?",
                    (str(student_id), str(course_id)),
                ).fetchone()
                return _row_to_enrollment(row) if row else None
            finally:
                conn.close()

    def list_by_course(
        self, course_id: UUID, statuses: list[EnrollmentStatus] | None = None
    ) -> list[Enrollment]:
        query = "SELECT * FROM enrollments WHERE course_id = ?"
        params: list[Any] = [str(course_id)]
        if statuses:
            query += f" AND status IN ({','.join('?' for _ in statuses)})"
            params.extend(statuses)
        query += " ORDER BY enrolled_at ASC, id ASC"
        with storage_errors():
            conn = self._get_conn()
            try:
                return [_row_to_enrollment(r) for r in conn.execute(query, params).fetchall()]
            finally:
                conn.close()

    def list_by_student(
        self, student_id: UUID, statuses: list[EnrollmentStatus] | None = None
    ) -> list[Enrollment]:
        query = "SELECT * FROM enrollments WHERE student_id = ?"
        params: list[Any] = [str(student_id)]
        if statuses:
            query += f" AND status IN ({','.join('?' for _ in statuses)})"
            params.extend(statuses)
        query += " ORDER BY enrolled_at ASC, id ASC"
        with storage_errors():
            conn = self._get_conn()
            try:
                return [_row_to_enrollment(r) for r in conn.execute(query, params).fetchall()]
            finally:
                conn.close()

    def status_counts(self, course_id: UUID | None = None) -> dict[str, int]:
        query = "SELECT status, COUNT(*) AS n FROM enrollments"
        params: list[Any] = []
        if course_id:
            query += " WHERE course_id = ?"
            params.append(str(course_id))
        query += " GROUP BY status"
        with storage_errors():
            conn = self._get_conn()
            try:
                return {r["status"]: r["n"] for r in conn.execute(query, params).fetchall()}
            finally:
                conn.close()

    def try_admit(
        self, enrollment_id: UUID, student_id: UUID, course_id: UUID, now: datetime
    ) -> AdmitOutcome:
        """
        Conditional check-and-admit in one write transaction.

        The seat is taken only if the course is still published and below
        capacity at write time; the pair row is inserted, or a dropped row is
        reactivated, only if no active/completed row exists. Either condition
        failing rolls the whole transaction back.
        """
        with storage_errors():
            conn = self._get_conn()
            try:
                cursor = conn.execute(
                    "UPDATE courses SET enrolled_count = enrolled_count + 1, "
                    "version = version + 1, updated_at = ? "
                    "WHERE id = ? AND deleted_at IS NULL AND status = 'published' "
                    "AND enrolled_count < capacity",
                    (fmt_dt(now), str(course_id)),
                )
                if cursor.rowcount != 1:
                    conn.rollback()
                    return AdmitOutcome.NO_SEAT

                cursor = conn.execute(
                    """
                    INSERT INTO enrollments (
                        id, student_id, course_id, status, enrolled_at, ended_at
                    ) VALUES (?, ?, ?, 'active', ?, NULL)
                    ON CONFLICT (student_id, course_id) DO UPDATE SET
                        status = 'active',
                        enrolled_at = excluded.enrolled_at,
                        ended_at = NULL
                    WHERE enrollments.status = 'dropped'
                    """,
                    (str(enrollment_id), str(student_id), str(course_id), fmt_dt(now)),
                )
                if cursor.rowcount != 1:
                    conn.rollback()
                    return AdmitOutcome.PAIR_TAKEN

                conn.commit()
                return AdmitOutcome.ADMITTED
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def release(
        self,
        student_id: UUID,
        course_id: UUID,
        new_status: EnrollmentStatus,
        now: datetime,
    ) -> bool:
        """Move an active pair to dropped/completed and free its seat."""
        with storage_errors():
            conn = self._get_conn()
            try:
                cursor = conn.execute(
                    "UPDATE enrollments SET status = ?, ended_at = ? "
                    "WHERE student_id = ? AND course_id = ? AND status = 'active'",
                    (new_status, fmt_dt(now), str(student_id), str(course_id)),
                )
                if cursor.rowcount != 1:
                    conn.rollback()
                    return False
                conn.execute(
                    "UPDATE courses SET enrolled_count = enrolled_count - 1, "
                    "version = version + 1, updated_at = ? "
                    "WHERE id = ? AND enrolled_count > 0",
                    (fmt_dt(now), str(course_id)),
                )
                conn.commit()
                return True
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()


# --- Eligibility snapshot ---


class SQLiteEligibilityReader(_SQLiteRepo):
    """Reads everything eligibility needs inside one read transaction."""

    def read(self, student_id: UUID, course_id: UUID) -> EligibilitySnapshot | None:
        with storage_errors():
            conn = self._get_conn()
            try:
                conn.execute("BEGIN")
                row = conn.execute(
                    "SELECT * FROM courses WHERE id = ? AND deleted_at IS NULL",
                    (str(course_id),),
                ).fetchone()
                if not row:
                    return None
                prereqs = [
                    UUID(r["prerequisite_id"])
                    for r in conn.execute(
                        "SELECT prerequisite_id FROM course_prerequisites WHERE course_id = ?",
                        (str(course_id),),
                    ).fetchall()
                ]
                course = _row_to_course(row, prereqs)
                pair = conn.execute(
                    "SELECT * FROM enrollments WHERE student_id = ? AND course_id = ?",
                    (str(student_id), str(course_id)),
                ).fetchone()
                completed = {
                    UUID(r["course_id"])
                    for r in conn.execute(
                        "SELECT course_id FROM enrollments "
                        "WHERE student_id = ? AND status = 'completed'",
                        (str(student_id),),
                    ).fetchall()
                }
                return EligibilitySnapshot(
                    course=course,
                    enrollment=_row_to_enrollment(pair) if pair else None,
                    completed_course_ids=frozenset(completed),
                )
            finally:
                conn.rollback()
                conn.close()


# --- Progress ---


def _row_to_progress(row: dict[str, Any]) -> Progress:
    return Progress(
        student_id=UUID(row["student_id"]),
        course_id=UUID(row["course_id"]),
        completion_percentage=row["completion_percentage"],
        completed_modules=json.loads(row["completed_modules_json"]),
        last_accessed_at=parse_dt(row["last_accessed_at"]) or datetime.min,
    )


class SQLiteProgressRepo(_SQLiteRepo):
    def save(self, progress: Progress) -> Progress:
        with storage_errors():
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO progress (
                        student_id, course_id, completion_percentage,
                        completed_modules_json, last_accessed_at
                    ) VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT (student_id, course_id) DO UPDATE SET
                        completion_percentage = excluded.completion_percentage,
                        completed_modules_json = excluded.completed_modules_json,
                        last_accessed_at = excluded.last_accessed_at
                    """,
                    (
                        str(progress.student_id),
                        str(progress.course_id),
                        progress.completion_percentage,
                        json.dumps(progress.completed_modules),
                        fmt_dt(progress.last_accessed_at),
                    ),
                )
                conn.commit()
                return progress
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def get(self, student_id: UUID, course_id: UUID) -> Progress | None:
        with storage_errors():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT * FROM progress WHERE student_id = ? AND course_id = ?",
                    (str(student_id), str(course_id)),
                ).fetchone()
                return _row_to_progress(row) if row else None
            finally:
                conn.close()

    def list_by_course(self, course_id: UUID) -> list[Progress]:
        with storage_errors():
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT * FROM progress WHERE course_id = ? ORDER BY student_id",
                    (str(course_id),),
                ).fetchall()
                return [_row_to_progress(r) for r in rows]
            finally:
                conn.close()

    def mean_completion(self) -> float | None:
        with storage_errors():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT AVG(completion_percentage) AS avg FROM progress"
                ).fetchone()
                return row["avg"]
            finally:
                conn.close()


# --- Feedback ---


def _row_to_feedback(row: dict[str, Any]) -> Feedback:
    return Feedback(
        id=UUID(row["id"]),
        student_id=UUID(row["student_id"]),
        course_id=UUID(row["course_id"]),
        rating=row["rating"],
        comment=row["comment"],
        categories=json.loads(row["categories_json"]),
        submitted_at=parse_dt(row["submitted_at"]) or datetime.min,
    )


class SQLiteFeedbackRepo(_SQLiteRepo):
    def insert(self, feedback: Feedback) -> Feedback:
        with storage_errors():
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO feedback (
                        id, student_id, course_id, rating, comment,
                        categories_json, submitted_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(feedback.id),
                        str(feedback.student_id),
                        str(feedback.course_id),
                        feedback.rating,
                        feedback.comment,
                        json.dumps(feedback.categories),
                        fmt_dt(feedback.submitted_at),
                    ),
                )
                conn.commit()
                return feedback
            except sqlite3.IntegrityError as e:
                conn.rollback()
                raise ConflictError("Feedback already submitted") from e
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def get(self, student_id: UUID, course_id: UUID) -> Feedback | None:
        with storage_errors():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT * FROM feedback WHERE student_id = ? AND course_id = ?",
                    (str(student_id), str(course_id)),
                ).fetchone()
                return _row_to_feedback(row) if row else None
            finally:
                conn.close()

    def list_by_course(self, course_id: UUID) -> list[Feedback]:
        with storage_errors():
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT * FROM feedback WHERE course_id = ? ORDER BY submitted_at ASC, id ASC",
                    (str(course_id),),
                ).fetchall()
                return [_row_to_feedback(r) for r in rows]
            finally:
                conn.close()

    def rating_summary(self) -> tuple[int, float | None]:
        with storage_errors():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT COUNT(*) AS n, AVG(rating) AS avg FROM feedback"
                ).fetchone()
                return row["n"], row["avg"]
            finally:
                conn.close()
