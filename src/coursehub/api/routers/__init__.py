"""API routers."""

from coursehub.api.routers import courses, health, metrics, students

__all__ = ["courses", "health", "metrics", "students"]
