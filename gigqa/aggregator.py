"""Master agent: filters and merges the qualitative output of the evaluator set.

The aggregator is a second model call rather than a set union. It judges each
point against the job's requirements, drops redundant or unsupported points
and returns one consolidated list. It is told not to invent new observations.
"""

import logging
from typing import List, Tuple

from .agents import require_object, string_list
from .json_extract import extract_json
from .llm_client import LLMClient
from .models import JobSpec, QualityOpinion, ReviewOpinion, WorkArtifact
from .prompts import build_quality_master_prompt, build_review_master_prompt

logger = logging.getLogger(__name__)

MASTER = "master"


def aggregate_quality_feedback(client: LLMClient,
                               work: WorkArtifact,
                               job: JobSpec,
                               opinions: List[QualityOpinion]) -> Tuple[List[str], List[str]]:
    feedback = [
        {"positiveFeedback": o.positive_feedback, "negativeFeedback": o.negative_feedback}
        for o in opinions
    ]
    prompt = build_quality_master_prompt(job, feedback)
    resp = require_object(MASTER, extract_json(work.ask(client, prompt)))
    positive = string_list(MASTER, resp, "aggregatedPositiveFeedback", required=True)
    negative = string_list(MASTER, resp, "aggregatedNegativeFeedback", required=True)
    logger.info("Master agent kept %d positive and %d negative points", len(positive), len(negative))
    return positive, negative


def aggregate_review_considerations(client: LLMClient,
                                    work: WorkArtifact,
                                    context: str,
                                    opinions: List[ReviewOpinion]) -> List[str]:
    evaluations = [{"agent": o.policy, "response": o.to_wire()} for o in opinions]
    prompt = build_review_master_prompt(context, evaluations)
    resp = require_object(MASTER, extract_json(work.ask(client, prompt)))
    considerations = string_list(MASTER, resp, "aggregatedCriticalConsideration", required=True)
    logger.info("Master agent kept %d critical considerations", len(considerations))
    return considerations
