"""Job-creation helpers: structured job details from a blurb, and a gig image."""

import logging

from .agents import require_object
from .json_extract import extract_json
from .llm_client import LLMClient
from .models import JobSpec
from .prompts import build_gig_image_prompt, build_job_extraction_prompt

logger = logging.getLogger(__name__)


def extract_job_details(client: LLMClient, blurb: str) -> JobSpec:
    resp = require_object("job_extractor", extract_json(client.complete(build_job_extraction_prompt(blurb))))
    job = JobSpec.from_dict(resp)
    logger.info(
        "Extracted job %r with %d requirements and %d instructions",
        job.title, len(job.requirements), len(job.instructions),
    )
    return job


def generate_gig_image(client: LLMClient, title: str, description: str) -> bytes:
    return client.generate_image(build_gig_image_prompt(title, description))
