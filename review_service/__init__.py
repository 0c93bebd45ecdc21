"""Customer review CRUD service with dashboard analytics endpoints."""

__version__ = "1.0.0"
