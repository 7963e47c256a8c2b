"""FastAPI dependencies resolving the services from the application context."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from coursehub.context import AppContext
from coursehub.services.courses import CourseService
from coursehub.services.students import StudentService


def get_context(request: Request) -> AppContext:
    context: AppContext | None = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context is not initialized")
    return context


def get_course_service(context: Annotated[AppContext, Depends(get_context)]) -> CourseService:
    return context.courses


def get_student_service(context: Annotated[AppContext, Depends(get_context)]) -> StudentService:
    return context.students


CourseServiceDep = Annotated[CourseService, Depends(get_course_service)]
StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
