"""CourseHub: REST API for courses and students over MongoDB with a Redis read-through cache."""

__version__ = "0.1.0"
