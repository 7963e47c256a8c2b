"""Course API router.

Endpoints:
- POST   /api/courses          - Create course
- GET    /api/courses          - List courses
- GET    /api/courses/stats    - Enrollment statistics
- POST   /api/courses/filter   - List courses matching a filter body
- GET    /api/courses/{id}     - Get course (cached)
- PUT    /api/courses/{id}     - Update course fields
- DELETE /api/courses/{id}     - Delete course
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body

from coursehub.api.deps import CourseServiceDep

router = APIRouter(prefix="/api/courses", tags=["courses"])

JsonObject = Annotated[dict[str, Any], Body()]


@router.post("", status_code=201)
async def create_course(body: JsonObject, courses: CourseServiceDep) -> dict[str, str]:
    course_id = await courses.create(body)
    return {"message": "Course created successfully", "courseId": course_id}


@router.get("")
async def list_courses(courses: CourseServiceDep) -> list[dict[str, Any]]:
    return await courses.list()


# Registered before /{course_id} so "stats" is not taken for an identifier
@router.get("/stats")
async def get_course_stats(courses: CourseServiceDep) -> dict[str, Any]:
    """Return enrollment statistics across all courses."""
    stats = await courses.statistics()
    return stats.to_dict()


@router.post("/filter")
async def filter_courses(body: JsonObject, courses: CourseServiceDep) -> list[dict[str, Any]]:
    return await courses.list(body)


@router.get("/{course_id}")
async def get_course(course_id: str, courses: CourseServiceDep) -> dict[str, Any]:
    return await courses.get(course_id)


@router.put("/{course_id}")
async def update_course(course_id: str, body: JsonObject, courses: CourseServiceDep) -> dict[str, str]:
    await courses.update(course_id, body)
    return {"message": "Course updated successfully"}


@router.delete("/{course_id}")
async def delete_course(course_id: str, courses: CourseServiceDep) -> dict[str, str]:
    await courses.delete(course_id)
    return {"message": "Course deleted successfully"}
