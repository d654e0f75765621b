"""
Error classes for the gigqa pipeline.

Provides structured exceptions for:
- Model invocation failures (transient upstream I/O)
- Agent output errors (unusable or incomplete model output)
- Submission workflow errors (unknown submission, disallowed transition)
"""

from typing import Any, Dict, Optional


class GigQAError(Exception):
    """Base exception for all gigqa errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ModelInvocationError(GigQAError):
    """
    Transient failure talking to the generative service.

    Raised once the adapter's retry attempts are spent. The caller may retry the
    whole quality-check or review call; no submission state has changed.
    """


class AgentOutputError(GigQAError):
    """
    An agent's parsed output is missing a required field or holds an unusable value.

    This is a data-quality error, distinct from an agent that explicitly
    returned a low score.
    """

    def __init__(self, policy: str, field: str, reason: str, raw: Any = None):
        self.policy = policy
        self.field = field
        self.reason = reason
        self.raw = raw
        message = f"Agent '{policy}' returned unusable '{field}': {reason}"
        super().__init__(message, {"policy": policy, "field": field, "reason": reason})


class SubmissionNotFoundError(GigQAError):
    """No work submission exists for the job/freelancer pair."""

    def __init__(self, job_id: str, freelancer_address: str):
        self.job_id = job_id
        self.freelancer_address = freelancer_address
        super().__init__(
            "Work submission not found",
            {"job_id": job_id, "freelancer_address": freelancer_address},
        )


class InvalidTransitionError(GigQAError):
    """An action was applied to a submission whose status does not allow it."""

    def __init__(self, status: str, action: str):
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} a submission that is {status}",
            {"status": status, "action": action},
        )
