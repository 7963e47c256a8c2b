"""Course service: cached CRUD and enrollment statistics."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from coursehub.core.errors import NotFound
from coursehub.persistence.gateway import Document
from coursehub.services.base import EntityService

COURSES = "courses"
STUDENTS = "students"


@dataclass
class CourseEnrollment:
    """Number of students enrolled in one course."""

    course_id: str
    student_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"courseId": self.course_id, "studentCount": self.student_count}


@dataclass
class CourseStatistics:
    """Point-in-time enrollment statistics.

    Each figure comes from its own count query, so under concurrent writes
    the figures may describe slightly different states of the store.
    """

    total_courses: int
    course_with_most_students: CourseEnrollment | None
    average_students_per_course: float
    total_students_registered: int
    courses_without_students: int

    def to_dict(self) -> dict[str, Any]:
        most = self.course_with_most_students
        return {
            "totalCourses": self.total_courses,
            "courseWithMostStudents": most.to_dict() if most else None,
            "averageStudentsPerCourse": self.average_students_per_course,
            "totalStudentsRegistered": self.total_students_registered,
            "coursesWithoutStudents": self.courses_without_students,
        }


class CourseService(EntityService):
    entity = "course"
    label = "Course"
    collection = COURSES
    required_fields = ("title", "description")

    async def list(self, filter: Mapping[str, Any] | None = None) -> list[Document]:
        """List courses; an empty result is reported as NotFound."""
        courses = await super().list(filter)
        if not courses:
            raise NotFound("No course matches" if filter else "No courses found")
        return courses

    async def statistics(self) -> CourseStatistics:
        """Compute enrollment statistics with one student count per course."""
        total_courses = await self.store.count(COURSES)
        courses = await self.store.list_all(COURSES)

        # Per-course counts are independent, so they run concurrently
        counts = await asyncio.gather(
            *(self.store.count(STUDENTS, {"courses": course["_id"]}) for course in courses)
        )
        enrollments = [
            CourseEnrollment(course_id=str(course["_id"]), student_count=count)
            for course, count in zip(courses, counts)
        ]

        most: CourseEnrollment | None = None
        for enrollment in enrollments:
            if enrollment.student_count > (most.student_count if most else 0):
                most = enrollment

        enrolled = sum(counts)
        total_students = await self.store.count(STUDENTS)

        return CourseStatistics(
            total_courses=total_courses,
            course_with_most_students=most,
            average_students_per_course=enrolled / total_courses if total_courses > 0 else 0,
            total_students_registered=total_students,
            courses_without_students=sum(1 for count in counts if count == 0),
        )
