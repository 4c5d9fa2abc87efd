"""API route modules."""

from ridejob.api.routes import applicants, coupang, jobs_count, location

__all__ = ["applicants", "coupang", "jobs_count", "location"]
