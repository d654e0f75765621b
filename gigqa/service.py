"""Marketplace service: the request handlers behind the HTTP routes.

Each handler returns a ``ServiceResponse`` carrying the structured body
(``success`` flag plus a human-readable ``message``) and an HTTP status.
Upstream and model-output failures surface only as a generic internal error.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .agents import AgentPolicy, policies_from_config
from .config import ServiceConfig
from .errors import AgentOutputError, InvalidTransitionError, ModelInvocationError, SubmissionNotFoundError
from .jobs import extract_job_details, generate_gig_image
from .llm_client import LLMClient
from .models import JobSpec, QualityCheckResult, RejectionAction, WorkArtifact, WorkSubmission
from .resolver import resolve_work
from .storage import QualityRecord, SubmissionStore
from .submissions import RESUBMITTABLE, apply_rejection, approve, new_submission, passes_quality_gate, resubmit
from .workflow import quality_check, review

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal Server Error"
UPSTREAM_ERRORS = (ModelInvocationError, AgentOutputError)

REJECTION_MESSAGES = {
    RejectionAction.FINAL_REJECTION: "Work rejected - maximum retries exceeded",
    RejectionAction.REVISION_REQUESTED: "Revision requested - freelancer can resubmit",
    RejectionAction.REASSIGN_RECOMMENDED: "Work rejected - job should be reassigned to another freelancer",
}


@dataclass
class ServiceResponse:
    body: Dict[str, Any]
    status_code: int = 200


def failure(message: str, status_code: int) -> ServiceResponse:
    return ServiceResponse({"success": False, "message": message}, status_code)


def internal_error(context: str, exc: Exception) -> ServiceResponse:
    logger.error("Error in %s: %s", context, exc, exc_info=True)
    return failure(INTERNAL_ERROR, 500)


def feedback_body(result: QualityCheckResult) -> Dict[str, Any]:
    return {"positive": list(result.positive_feedback), "negative": list(result.negative_feedback)}


class MarketplaceService:
    def __init__(self,
                 client: LLMClient,
                 store: SubmissionStore,
                 config: ServiceConfig,
                 policies: Optional[List[AgentPolicy]] = None,
                 resolver: Optional[Callable[[str], WorkArtifact]] = None):
        self.client = client
        self.store = store
        self.config = config
        self.policies = policies or policies_from_config(config)
        self.resolver = resolver or (lambda ref: resolve_work(ref, timeout=config.request_timeout))

    def _quality_check(self, work: WorkArtifact, job: JobSpec) -> QualityCheckResult:
        return quality_check(self.client, work, job, self.policies, parallel=self.config.parallel_agents)

    def _submission(self, job_id: str, freelancer_address: str) -> WorkSubmission:
        submission = self.store.get_submission(job_id, freelancer_address)
        if submission is None:
            raise SubmissionNotFoundError(job_id, freelancer_address)
        return submission

    def _prior_quality(self, submission: WorkSubmission) -> QualityCheckResult:
        record = self.store.latest_quality_record(
            submission.job_id, submission.freelancer_address, work=submission.work,
        )
        if record is not None:
            return record.result
        logger.warning(
            "No quality record for %s/%s; using the submission score",
            submission.job_id, submission.freelancer_address,
        )
        return QualityCheckResult(quality=submission.quality_score, positive_feedback=[], negative_feedback=[])

    def check_quality(self, job_id: str, work: str, job: JobSpec) -> ServiceResponse:
        try:
            result = self._quality_check(self.resolver(work), job)
        except UPSTREAM_ERRORS as e:
            return internal_error("quality check", e)
        self.store.add_quality_record(QualityRecord(job_id=job_id, freelancer_address=None, work=work, result=result))
        return ServiceResponse(result.to_wire())

    def submit_work(self, job_id: str, freelancer_address: str, work: str, job: JobSpec) -> ServiceResponse:
        existing = self.store.get_submission(job_id, freelancer_address)
        if existing is not None and existing.status not in RESUBMITTABLE:
            return failure(InvalidTransitionError(existing.status.value, "resubmit").message, 409)
        try:
            result = self._quality_check(self.resolver(work), job)
        except UPSTREAM_ERRORS as e:
            return internal_error("work submission", e)

        self.store.add_quality_record(
            QualityRecord(job_id=job_id, freelancer_address=freelancer_address, work=work, result=result)
        )
        body = {"qualityScore": result.quality, "feedback": feedback_body(result)}

        if not passes_quality_gate(result, self.config.submission):
            body.update(success=False, message="Work quality score is too low. Please improve your work and try again.")
            return ServiceResponse(body, 400)

        if existing is None:
            self.store.save_submission(new_submission(job_id, freelancer_address, work, result))
        else:
            resubmit(existing, work, result, self.config.submission)
            self.store.save_submission(existing)

        body.update(success=True, message="Work submitted successfully and is pending review!")
        return ServiceResponse(body)

    def employer_action(self,
                        job_id: str,
                        freelancer_address: str,
                        action: str,
                        job: JobSpec,
                        rejection_reason: Optional[str] = None) -> ServiceResponse:
        try:
            submission = self._submission(job_id, freelancer_address)
        except SubmissionNotFoundError as e:
            return failure(e.message, 404)

        try:
            if action == "approve":
                approve(submission)
                self.store.save_submission(submission)
                return ServiceResponse({"success": True, "message": "Work approved successfully!"})
            if action == "reject":
                if not rejection_reason:
                    return failure("Rejection reason is required", 400)
                return self._reject(submission, job, rejection_reason)
        except InvalidTransitionError as e:
            return failure(e.message, 409)
        except UPSTREAM_ERRORS as e:
            return internal_error("employer action", e)
        return failure("Invalid action", 400)

    def _reject(self, submission: WorkSubmission, job: JobSpec, rejection_reason: str) -> ServiceResponse:
        prior = self._prior_quality(submission)
        work = self.resolver(submission.work)
        verdict = review(self.client, work, job, prior, rejection_reason,
                         self.policies, parallel=self.config.parallel_agents)
        outcome = apply_rejection(submission, rejection_reason, verdict, self.config.submission)

        body: Dict[str, Any] = {
            "action": outcome.action.value,
            "reviewResult": verdict.to_wire(),
            "canReject": outcome.accepted,
        }
        if not outcome.accepted:
            body.update(
                success=False,
                message=(
                    f"Rejection reason is not sufficiently justified (Review Score: {verdict.review_score:.1f}/10). "
                    "You can either accept the work or provide a better rejection reason."
                ),
            )
            return ServiceResponse(body)

        self.store.save_submission(submission)
        body.update(success=True, message=REJECTION_MESSAGES[outcome.action])
        if outcome.retries_left is not None:
            body["retriesLeft"] = outcome.retries_left
        return ServiceResponse(body)

    def get_review(self,
                   job_id: str,
                   freelancer_address: str,
                   job: JobSpec,
                   rejection_reason: str) -> ServiceResponse:
        try:
            submission = self._submission(job_id, freelancer_address)
        except SubmissionNotFoundError as e:
            return failure(e.message, 404)
        try:
            verdict = review(self.client, self.resolver(submission.work), job,
                             self._prior_quality(submission), rejection_reason,
                             self.policies, parallel=self.config.parallel_agents)
        except UPSTREAM_ERRORS as e:
            return internal_error("review", e)
        return ServiceResponse(verdict.to_wire())

    def list_submissions(self, job_id: Optional[str], freelancer_address: Optional[str] = None) -> ServiceResponse:
        if not job_id:
            return failure("Job ID is required", 400)
        submissions = self.store.list_submissions(job_id, freelancer_address)
        return ServiceResponse({"success": True, "submissions": [s.to_wire() for s in submissions]})

    def extract_job(self, blurb: str) -> ServiceResponse:
        try:
            job = extract_job_details(self.client, blurb)
        except UPSTREAM_ERRORS as e:
            logger.error("Failed to extract job details: %s", e)
            return ServiceResponse({"error": "Failed to extract job details"}, 500)
        return ServiceResponse(job.to_dict())

    def gig_image(self, title: str, description: str) -> bytes:
        return generate_gig_image(self.client, title, description)
