"""Notification dispatch service: submission, asynchronous delivery and retry."""

__version__ = "1.0.0"
