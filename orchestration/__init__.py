"""Orchestration layer - policies wrapping the execution monitor."""

from .policies import RetryPolicy, run_with_deadline, run_with_retry

__all__ = [
    "RetryPolicy",
    "run_with_deadline",
    "run_with_retry",
]
