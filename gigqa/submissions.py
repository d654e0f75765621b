"""
Work submission lifecycle.

States: pending -> approved | rejected | revision_requested, and
revision_requested -> pending on resubmission. approved and rejected are final.

An employer rejection is arbitrated by the review orchestrator's scores:
- review score below the veto threshold: the rejection is not accepted and
  nothing changes;
- fixable strictly greater than reassign: a revision is requested, unless the
  retry cap is reached, in which case the rejection is final;
- otherwise (ties included): rejected, with reassignment recommended.
"""

import logging
from typing import Optional

from .config import SubmissionPolicy
from .errors import InvalidTransitionError
from .models import (
    AgentReviewResponse,
    QualityCheckResult,
    RejectionAction,
    RejectionOutcome,
    SubmissionStatus,
    WorkSubmission,
)

logger = logging.getLogger(__name__)

RESUBMITTABLE = (SubmissionStatus.PENDING, SubmissionStatus.REVISION_REQUESTED)


def passes_quality_gate(result: QualityCheckResult, policy: SubmissionPolicy) -> bool:
    return result.quality > policy.min_quality


def new_submission(job_id: str,
                   freelancer_address: str,
                   work: str,
                   quality_result: QualityCheckResult) -> WorkSubmission:
    return WorkSubmission(
        job_id=job_id,
        freelancer_address=freelancer_address,
        work=work,
        quality_score=quality_result.quality,
    )


def resubmit(submission: WorkSubmission,
             work: str,
             quality_result: QualityCheckResult,
             policy: SubmissionPolicy) -> bool:
    """Replace the work on a submission and put it back in front of the employer.

    Returns False, leaving the submission untouched, when the new work does
    not clear the quality gate.
    """
    if submission.status not in RESUBMITTABLE:
        raise InvalidTransitionError(submission.status.value, "resubmit")
    if not passes_quality_gate(quality_result, policy):
        return False
    submission.work = work
    submission.quality_score = quality_result.quality
    submission.status = SubmissionStatus.PENDING
    submission.touch()
    return True


def approve(submission: WorkSubmission) -> None:
    if submission.status is not SubmissionStatus.PENDING:
        raise InvalidTransitionError(submission.status.value, "approve")
    submission.status = SubmissionStatus.APPROVED
    submission.touch()


def decide_rejection(review: AgentReviewResponse,
                     retry_count: int,
                     policy: SubmissionPolicy) -> RejectionAction:
    if review.review_score < policy.veto_below:
        return RejectionAction.CANNOT_REJECT
    if review.fixable_score > review.reassign_score:
        if retry_count >= policy.max_retries:
            return RejectionAction.FINAL_REJECTION
        return RejectionAction.REVISION_REQUESTED
    return RejectionAction.REASSIGN_RECOMMENDED


def apply_rejection(submission: WorkSubmission,
                    rejection_reason: str,
                    review: AgentReviewResponse,
                    policy: SubmissionPolicy) -> RejectionOutcome:
    if submission.status is not SubmissionStatus.PENDING:
        raise InvalidTransitionError(submission.status.value, "reject")

    action = decide_rejection(review, submission.retry_count, policy)
    logger.info(
        "Rejection of %s/%s by review %.1f: %s",
        submission.job_id, submission.freelancer_address, review.review_score, action.value,
    )
    if action is RejectionAction.CANNOT_REJECT:
        return RejectionOutcome(action=action, review=review)

    submission.rejection_reason = rejection_reason
    submission.review_score = review.review_score
    submission.fixable_score = review.fixable_score
    submission.reassign_score = review.reassign_score

    retries_left: Optional[int] = None
    if action is RejectionAction.REVISION_REQUESTED:
        submission.status = SubmissionStatus.REVISION_REQUESTED
        submission.retry_count += 1
        retries_left = policy.max_retries - submission.retry_count
    else:
        submission.status = SubmissionStatus.REJECTED
    submission.touch()
    return RejectionOutcome(action=action, review=review, retries_left=retries_left)
