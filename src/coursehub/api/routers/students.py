"""Student API router.

Endpoints:
- POST   /api/students               - Create student
- GET    /api/students               - List students
- GET    /api/students/stats         - Student statistics
- POST   /api/students/filter        - List students matching a filter body
- GET    /api/students/{id}          - Get student (cached)
- PUT    /api/students/{id}          - Update student fields
- DELETE /api/students/{id}          - Delete student
- POST   /api/students/{id}/courses  - Enroll in a course
- DELETE /api/students/{id}/courses  - Unenroll from a course
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body
from pydantic import BaseModel, Field

from coursehub.api.deps import StudentServiceDep

router = APIRouter(prefix="/api/students", tags=["students"])

JsonObject = Annotated[dict[str, Any], Body()]


class EnrollmentRequest(BaseModel):
    """Body of the enrollment endpoints."""

    model_config = {"populate_by_name": True}

    course_id: str = Field(alias="courseId")


@router.post("", status_code=201)
async def create_student(body: JsonObject, students: StudentServiceDep) -> dict[str, str]:
    student_id = await students.create(body)
    return {"message": "Student created successfully", "studentId": student_id}


@router.get("")
async def list_students(students: StudentServiceDep) -> list[dict[str, Any]]:
    return await students.list()


@router.get("/stats")
async def get_student_stats(students: StudentServiceDep) -> dict[str, int]:
    return await students.statistics()


@router.post("/filter")
async def filter_students(body: JsonObject, students: StudentServiceDep) -> list[dict[str, Any]]:
    return await students.list(body)


@router.get("/{student_id}")
async def get_student(student_id: str, students: StudentServiceDep) -> dict[str, Any]:
    return await students.get(student_id)


@router.put("/{student_id}")
async def update_student(
    student_id: str, body: JsonObject, students: StudentServiceDep
) -> dict[str, str]:
    await students.update(student_id, body)
    return {"message": "Student updated successfully"}


@router.delete("/{student_id}")
async def delete_student(student_id: str, students: StudentServiceDep) -> dict[str, str]:
    await students.delete(student_id)
    return {"message": "Student deleted successfully"}


@router.post("/{student_id}/courses")
async def enroll_student(
    student_id: str, enrollment: EnrollmentRequest, students: StudentServiceDep
) -> dict[str, str]:
    """Enroll a student in a course."""
    await students.enroll(student_id, enrollment.course_id)
    return {"message": "Student enrolled in course successfully"}


@router.delete("/{student_id}/courses")
async def unenroll_student(
    student_id: str, enrollment: EnrollmentRequest, students: StudentServiceDep
) -> dict[str, str]:
    """Remove a course from a student's enrollments."""
    await students.unenroll(student_id, enrollment.course_id)
    return {"message": "Student unenrolled from course successfully"}
