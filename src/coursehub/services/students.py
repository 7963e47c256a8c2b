"""Student service: cached CRUD and course enrollment.

Enrollment is stored on the student document as an ordered ``courses`` array
of course ObjectIds. The membership check runs on the (possibly cached)
student snapshot; the append itself is conditional on the course not being
present in the stored array, so two concurrent enrollments of the same pair
cannot both add it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from coursehub.cache.redis import DEFAULT_TTL, CacheBackend
from coursehub.core.errors import Conflict, NotFound
from coursehub.core.ids import parse_identity
from coursehub.persistence.gateway import DocumentStore
from coursehub.services.base import EntityService
from coursehub.services.courses import STUDENTS, CourseService

logger = logging.getLogger(__name__)


def is_enrolled(student: Mapping[str, Any], course_id: str) -> bool:
    return any(str(enrolled) == course_id for enrolled in student.get("courses") or [])


class StudentService(EntityService):
    entity = "student"
    label = "Student"
    collection = STUDENTS
    required_fields = ("firstName", "lastName", "email")
    # Changed only through enroll and unenroll
    managed_fields = ("courses",)

    def __init__(
        self,
        store: DocumentStore,
        cache: CacheBackend,
        courses: CourseService,
        ttl: int = DEFAULT_TTL,
    ):
        super().__init__(store, cache, ttl)
        self.courses = courses

    async def enroll(self, student_id: str, course_id: str) -> None:
        """Add a course to a student's enrollment list.

        Raises:
            InvalidIdentity: If either identity is malformed.
            NotFound: If the student or the course does not exist.
            Conflict: If the student is already enrolled in the course.
        """
        self.check_identity(student_id)
        course_oid = parse_identity(course_id, "Course")

        student = await self.get(student_id)
        await self.courses.get(course_id)

        if is_enrolled(student, course_id):
            raise Conflict("Student is already enrolled in this course")

        # $push creates the array when the student has none yet
        matched = await self.store.modify_by_id(
            STUDENTS,
            student_id,
            {"$push": {"courses": course_oid}},
            condition={"courses": {"$ne": course_oid}},
        )
        if matched == 0:
            # The snapshot we checked was stale; drop it before reporting
            await self.invalidate(student_id)
            if await self.store.get_by_id(STUDENTS, student_id) is None:
                raise self.not_found()
            raise Conflict("Student is already enrolled in this course")

        await self.invalidate(student_id)
        logger.info(f"Student {student_id} enrolled in course {course_id}")

    async def unenroll(self, student_id: str, course_id: str) -> None:
        """Remove a course from a student's enrollment list.

        Only membership is checked; the course itself may no longer exist.

        Raises:
            InvalidIdentity: If either identity is malformed.
            NotFound: If the student does not exist or is not enrolled.
        """
        self.check_identity(student_id)
        course_oid = parse_identity(course_id, "Course")

        student = await self.get(student_id)
        if not is_enrolled(student, course_id):
            raise NotFound("Student is not enrolled in this course")

        matched = await self.store.modify_by_id(
            STUDENTS,
            student_id,
            {"$pull": {"courses": course_oid}},
            condition={"courses": course_oid},
        )
        if matched == 0:
            await self.invalidate(student_id)
            if await self.store.get_by_id(STUDENTS, student_id) is None:
                raise self.not_found()
            raise NotFound("Student is not enrolled in this course")

        await self.invalidate(student_id)
        logger.info(f"Student {student_id} unenrolled from course {course_id}")

    async def statistics(self) -> dict[str, int]:
        return {"totalStudents": await self.count()}

