"""Prompt builders for evaluator agents, the master aggregators and job helpers."""

import json
from typing import Any, Dict, List

from .models import JobSpec, QualityCheckResult

QUALITY_FORMAT = """Your response should be in the following format:
{{
    "quality": <quality of the work sample on a scale of 1 to 10>,
    "positiveFeedback": [
        <{positive}>
    ],
    "negativeFeedback": [
        <{negative}>
    ]
}}"""

VERY_LENIENT_QUALITY = (
    "You are a helpful quality assurance assistant with a generous perspective. "
    "You are given a job description and a work sample. Try to find ways the sample "
    "fulfills the intent, even if loosely.\n\n"
    + QUALITY_FORMAT.format(
        positive="list of positive feedbacks on the work sample",
        negative="list of gentle, constructive areas where the work might be improved slightly",
    )
    + "\n\nFocus on encouragement and assume good intent in the work. Give the benefit of "
    "the doubt wherever reasonable."
)

LENIENT_QUALITY = (
    "You are a quality assurance reviewer with a supportive mindset. You are given a job "
    "description and a work sample. Evaluate how well the sample meets the requirements, "
    "but remain flexible and prioritize overall intent and effort.\n\n"
    + QUALITY_FORMAT.format(
        positive="list of positive feedbacks on the work sample",
        negative="list of constructive feedbacks for possible improvements",
    )
    + "\n\nBe generally generous with your rating, unless the work clearly misses the mark."
)

NEUTRAL_QUALITY = (
    "You are a quality assurance expert. You are given a job description and a work sample. "
    "You need to check if the work sample meets the job requirements.\n\n"
    + QUALITY_FORMAT.format(
        positive="list of positive feedbacks on the work sample",
        negative="list of negative feedbacks on the work sample",
    )
)

STRICT_QUALITY = (
    "You are a meticulous quality assurance evaluator. You are given a job description and a "
    "work sample. Your job is to strictly assess whether the sample adheres to the requirements "
    "and instructions, with minimal tolerance for deviation.\n\n"
    + QUALITY_FORMAT.format(
        positive="list of precise, well-justified strengths of the work sample",
        negative="list of specific, clear shortcomings in the work sample",
    )
    + "\n\nBe critical. Only give high scores if the sample fully and exactly meets the stated "
    "requirements."
)

VERY_STRICT_QUALITY = (
    "You are a no-compromise quality assurance inspector. You are given a job description and a "
    "work sample. Your task is to rigorously evaluate the sample for full compliance with all "
    "listed requirements and instructions. Any deviation, however minor, should be noted.\n\n"
    + QUALITY_FORMAT.format(
        positive="list of strengths that meet or exceed expectations precisely",
        negative="list of all deficiencies, inaccuracies, or deviations from the job's stated requirements",
    )
    + "\n\nAssume the highest standards. Be detailed and unforgiving in your assessment. Only "
    "give a 10 if the work is flawless."
)

VERY_LENIENT_REVIEW = (
    "You are an empathetic review agent who generally gives workers the benefit of the doubt. "
    "You must decide whether the job poster's rejection reason is valid or over-critical. "
    "Lean towards seeing the work as acceptable and fixable."
)

LENIENT_REVIEW = (
    "You are a supportive review agent. Assess the validity of the rejection reason while "
    "remaining generous, but be prepared to acknowledge valid points."
)

NEUTRAL_REVIEW = (
    "You are a neutral review agent. Objectively determine whether the rejection reason is "
    "justified, without bias towards either the worker or the poster."
)

STRICT_REVIEW = (
    "You are a strict review agent. Scrutinise the work and the rejection reason closely, "
    "tending to side with the poster when there is reasonable doubt."
)

VERY_STRICT_REVIEW = (
    "You are a very strict review agent who assumes high standards must be met. Unless the "
    "evidence clearly shows the work satisfies all requirements, the rejection is likely valid."
)

JSON_ONLY = (
    "The response should be in JSON format, there should be no other text before or after "
    "the JSON in the response."
)


def job_section(job: JobSpec) -> str:
    return (
        f"Job Title: {job.title}\n"
        f"Job Description: {job.description}\n"
        f"Requirements: {json.dumps(job.requirements)}\n"
        f"Instructions: {json.dumps(job.instructions)}\n"
    )


def build_quality_agent_prompt(persona: str, job: JobSpec) -> str:
    return f"{persona}\n\n{JSON_ONLY}\n\n{job_section(job)}"


def build_quality_master_prompt(job: JobSpec, feedback: List[Dict[str, List[str]]]) -> str:
    return f"""You are a master quality assurance aggregator. Your role is to synthesize multiple QA agent evaluations into a single, objective summary.

You are given:
- A job title
- A job description
- A list of requirements and instructions
- A set of positive and negative feedbacks provided by multiple QA agents (who have reviewed the same work sample)

Your task:
- Carefully analyze whether the feedback aligns with the stated job requirements and instructions.
- Identify which points of feedback are valid, consistent, and supported by the job details.
- Remove any redundant, vague, or biased points.
- Do not generate your own feedback or speculate about the work sample; only judge the **validity and usefulness** of the provided feedback.
- Be neutral, precise, and fact-based.

Return a single JSON object in the following format:
{{
  "aggregatedPositiveFeedback": [
    <consolidated list of valid, non-redundant positive feedback points>
  ],
  "aggregatedNegativeFeedback": [
    <consolidated list of valid, non-redundant negative feedback points>
  ]
}}

{job_section(job)}FeedbackFromAgents: {json.dumps(feedback, indent=2)}
"""


def build_review_context(job: JobSpec, quality_result: QualityCheckResult, rejection_reason: str) -> str:
    return (
        f"{job_section(job)}\n"
        f"Aggregated QA Result: {json.dumps(quality_result.to_wire())}\n"
        f'Job Poster\'s Rejection Reason: "{rejection_reason}"'
    )


def build_review_agent_prompt(prefix: str, context: str) -> str:
    return f"""{prefix}

{context}

Return a JSON object **only** in the following format with no extra text:
{{
  "reviewScore": <number 1-10 indicating how valid the rejection reason is>,
  "criticalConsideration": [
    <list of concise bullet points examining the reason in light of the work and QA feedback>
  ],
  "fixableScore": <number 1-10 indicating likelihood the current worker can fix the issues>,
  "reassignScore": <number 1-10 indicating likelihood the job should be reassigned>
}}"""


def build_review_master_prompt(context: str, evaluations: List[Dict[str, Any]]) -> str:
    return f"""You are a master review aggregator. Your task is to analyse multiple agent evaluations of whether the job poster's rejection reason is justified. Do **not** add new opinions, only consolidate.

{context}

Here are the agent evaluations:
{json.dumps(evaluations, indent=2)}

Return a single JSON object in this exact format with **no** extra text:
{{
  "aggregatedCriticalConsideration": [
    <consolidated, non-redundant list of critical considerations>
  ]
}}"""


def build_job_extraction_prompt(blurb: str) -> str:
    return f"""You are a helpful assistant that extracts job details from a blurb. You need to carefully distinguish between requirements (general requirements for the job output) and instructions (specific requirements for the job output).

The extracted job details should be in the following JSON format:
{{
  "title": <clear, concise job title>,
  "description": <detailed description of what the job entails>,
  "requirements": [<list of general requirements that the final output must meet or have>],
  "instructions": [<list of specific requirements for the job output>]
}}

Examples:
- Requirements: "The poem should be 10 lines long", "The design should use blue color scheme"
- Instructions: "The poem must rhyme", "The design must be minimalist", "The logo must be scalable"

The blurb is: {blurb}

There should be no other text before or after the JSON in the response."""


def build_gig_image_prompt(title: str, description: str) -> str:
    return f"""Create a pixel art NFT image for a gig with the following details:

Title: {title}
Description: {description}

Generate a strict pixel art style image that represents this gig/job. The image should be:
- Pure pixel art with large, chunky pixels that are clearly visible
- 64-bit aesthetic with rich, vibrant color palette
- Suitable for NFT use with bold, distinctive design
- Representative of the gig's theme and purpose
- High contrast and visually striking
- Include relevant symbols or elements that relate to the job title and description
- Each pixel should be deliberately placed with no anti-aliasing or smooth gradients
- Maintain the authentic pixel art aesthetic throughout
- You do not need to include any text in the image, just a pictoral depiction of the gig/job as a pixel art image

Make sure the pixel art has a retro gaming feel with large, distinct pixels and captures the essence of the gig in a classic digital art format suitable for NFT minting."""
