"""Quality-check and dispute-review orchestration.

Both orchestrators are side-effect free: they run every active agent, wait for
all of them, average the scores and hand the qualitative output to the master
agent. Persisting the result is the caller's job.
"""

import logging
from typing import List, Optional, Sequence

from .agents import AgentPolicy, call_quality_agent, call_review_agent, default_policies, run_agents, select_policies
from .aggregator import aggregate_quality_feedback, aggregate_review_considerations
from .llm_client import LLMClient
from .models import AgentReviewResponse, JobSpec, QualityCheckResult, WorkArtifact
from .prompts import build_review_context

logger = logging.getLogger(__name__)


def default_active_policies() -> List[AgentPolicy]:
    return select_policies(default_policies(), ["neutral"])


def mean(values: Sequence[float]) -> float:
    if not values:
        raise ValueError("mean of an empty agent set")
    return sum(values) / len(values)


def quality_check(client: LLMClient,
                  work: WorkArtifact,
                  job: JobSpec,
                  policies: Optional[List[AgentPolicy]] = None,
                  parallel: bool = False) -> QualityCheckResult:
    if policies is None:
        policies = default_active_policies()
    opinions = run_agents(
        policies,
        lambda p: call_quality_agent(client, p, work, job),
        parallel=parallel,
    )
    positive, negative = aggregate_quality_feedback(client, work, job, opinions)
    result = QualityCheckResult(
        quality=mean([o.quality for o in opinions]),
        positive_feedback=positive,
        negative_feedback=negative,
    )
    logger.info("Quality check for %r: %.1f over %d agents", job.title, result.quality, len(opinions))
    return result


def review(client: LLMClient,
           work: WorkArtifact,
           job: JobSpec,
           quality_result: QualityCheckResult,
           rejection_reason: str,
           policies: Optional[List[AgentPolicy]] = None,
           parallel: bool = False) -> AgentReviewResponse:
    if policies is None:
        policies = default_active_policies()
    context = build_review_context(job, quality_result, rejection_reason)
    opinions = run_agents(
        policies,
        lambda p: call_review_agent(client, p, work, context),
        parallel=parallel,
    )
    considerations = aggregate_review_considerations(client, work, context, opinions)
    response = AgentReviewResponse(
        review_score=mean([o.review_score for o in opinions]),
        critical_consideration=considerations,
        fixable_score=mean([o.fixable_score for o in opinions]),
        reassign_score=mean([o.reassign_score for o in opinions]),
    )
    logger.info(
        "Review for %r: review=%.1f fixable=%.1f reassign=%.1f",
        job.title, response.review_score, response.fixable_score, response.reassign_score,
    )
    return response
