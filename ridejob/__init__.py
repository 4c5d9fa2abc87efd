"""RIDE JOB driver recruitment application form."""

__version__ = "0.1.0"
