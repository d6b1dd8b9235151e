"""Enrollment carrier split pipeline."""

__version__ = "1.0.0"
