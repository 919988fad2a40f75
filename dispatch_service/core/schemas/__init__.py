"""Shared API schemas."""

from dispatch_service.core.schemas.problem_details import ProblemDetails

__all__ = ["ProblemDetails"]
