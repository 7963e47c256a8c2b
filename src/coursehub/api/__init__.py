"""HTTP API for CourseHub."""

from coursehub.api.app import create_app

__all__ = ["create_app"]
