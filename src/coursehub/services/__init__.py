"""Entity services composing the entity store and the cache."""

from coursehub.services.base import EntityService
from coursehub.services.courses import CourseEnrollment, CourseService, CourseStatistics
from coursehub.services.students import StudentService

__all__ = [
    "CourseEnrollment",
    "CourseService",
    "CourseStatistics",
    "EntityService",
    "StudentService",
]
