"""Data models for the gigqa review pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

PolicyName = str
JobId = str
Address = str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class JobSpec:
    title: str
    description: str
    requirements: List[str]
    instructions: List[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobSpec":
        requirements = data.get("requirements", [])
        instructions = data.get("instructions", [])
        if not isinstance(requirements, list):
            requirements = [str(requirements)]
        if not isinstance(instructions, list):
            instructions = [str(instructions)]
        return cls(
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            requirements=[str(r) for r in requirements],
            instructions=[str(i) for i in instructions],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "requirements": list(self.requirements),
            "instructions": list(self.instructions),
        }


@dataclass(frozen=True)
class TextWork:
    """Work delivered as inline text. Appended to the prompt as a final section."""

    text: str

    def ask(self, client: Any, prompt: str) -> str:
        return client.complete(f"{prompt}\nWork Sample: {self.text}")

    def describe(self) -> str:
        return self.text


@dataclass(frozen=True)
class ImageWork:
    """Work delivered as an image. Sent inline next to the prompt."""

    data: bytes
    mime_type: str
    name: str = "image"

    def ask(self, client: Any, prompt: str) -> str:
        return client.complete_with_image(prompt, self)

    def describe(self) -> str:
        return f"<image {self.name} ({self.mime_type}, {len(self.data)} bytes)>"


WorkArtifact = Union[TextWork, ImageWork]


@dataclass
class QualityOpinion:
    policy: PolicyName
    quality: float
    positive_feedback: List[str]
    negative_feedback: List[str]


@dataclass
class ReviewOpinion:
    policy: PolicyName
    review_score: float
    critical_consideration: List[str]
    fixable_score: float
    reassign_score: float

    def to_wire(self) -> Dict[str, Any]:
        return {
            "reviewScore": self.review_score,
            "criticalConsideration": list(self.critical_consideration),
            "fixableScore": self.fixable_score,
            "reassignScore": self.reassign_score,
        }


@dataclass(frozen=True)
class QualityCheckResult:
    quality: float
    positive_feedback: List[str]
    negative_feedback: List[str]

    def to_wire(self) -> Dict[str, Any]:
        return {
            "quality": self.quality,
            "positiveFeedback": list(self.positive_feedback),
            "negativeFeedback": list(self.negative_feedback),
        }

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "QualityCheckResult":
        return cls(
            quality=float(data["quality"]),
            positive_feedback=[str(f) for f in data.get("positiveFeedback", [])],
            negative_feedback=[str(f) for f in data.get("negativeFeedback", [])],
        )


@dataclass(frozen=True)
class AgentReviewResponse:
    review_score: float
    critical_consideration: List[str]
    fixable_score: float
    reassign_score: float

    def to_wire(self) -> Dict[str, Any]:
        return {
            "reviewScore": self.review_score,
            "criticalConsideration": list(self.critical_consideration),
            "fixableScore": self.fixable_score,
            "reassignScore": self.reassign_score,
        }


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"


class RejectionAction(str, Enum):
    CANNOT_REJECT = "cannot_reject"
    REVISION_REQUESTED = "revision_requested"
    FINAL_REJECTION = "final_rejection"
    REASSIGN_RECOMMENDED = "reassign_recommended"


@dataclass
class WorkSubmission:
    job_id: JobId
    freelancer_address: Address
    work: str
    quality_score: float
    status: SubmissionStatus = SubmissionStatus.PENDING
    retry_count: int = 0
    rejection_reason: Optional[str] = None
    review_score: Optional[float] = None
    fixable_score: Optional[float] = None
    reassign_score: Optional[float] = None
    submitted_at: datetime = field(default_factory=utc_now)
    last_updated: datetime = field(default_factory=utc_now)

    def touch(self) -> None:
        self.last_updated = utc_now()

    def to_wire(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "freelancerAddress": self.freelancer_address,
            "work": self.work,
            "qualityScore": self.quality_score,
            "status": self.status.value,
            "retryCount": self.retry_count,
            "rejectionReason": self.rejection_reason,
            "reviewScore": self.review_score,
            "fixableScore": self.fixable_score,
            "reassignScore": self.reassign_score,
            "submittedAt": self.submitted_at.isoformat(),
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass
class RejectionOutcome:
    action: RejectionAction
    review: AgentReviewResponse
    retries_left: Optional[int] = None

    @property
    def accepted(self) -> bool:
        return self.action is not RejectionAction.CANNOT_REJECT
