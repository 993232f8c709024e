"""
Services for business logic.
"""

from .credits import should_award_task_credits, COMPLETED

__all__ = [
    "should_award_task_credits",
    "COMPLETED",
]
