"""FastAPI application exposing the marketplace routes."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response

from .config import ServiceConfig
from .errors import ModelInvocationError
from .llm_client import LLMClient
from .schemas import (
    EmployerActionRequest,
    ExtractJobRequest,
    GenerateImageRequest,
    QualityCheckRequest,
    ReviewRequest,
    SubmitWorkRequest,
)
from .service import MarketplaceService, ServiceResponse
from .storage import InMemorySubmissionStore

logger = logging.getLogger(__name__)


def build_service(config: Optional[ServiceConfig] = None) -> MarketplaceService:
    config = config or ServiceConfig.from_env()
    return MarketplaceService(LLMClient(config), InMemorySubmissionStore(), config)


def _json(resp: ServiceResponse) -> JSONResponse:
    return JSONResponse(resp.body, status_code=resp.status_code)


def create_app(service: Optional[MarketplaceService] = None) -> FastAPI:
    service = service or build_service()
    app = FastAPI(title="gigqa", version="0.1.0")

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.post("/api/getQualityCheck")
    def get_quality_check(body: QualityCheckRequest):
        return _json(service.check_quality(str(body.jobId), body.work, body.jobDetails.to_spec()))

    @app.post("/api/submitWork")
    def submit_work(body: SubmitWorkRequest):
        return _json(service.submit_work(body.jobId, body.freelancerAddress, body.work, body.jobDetails.to_spec()))

    @app.post("/api/employerAction")
    def employer_action(body: EmployerActionRequest):
        return _json(service.employer_action(
            body.jobId,
            body.freelancerAddress,
            body.action,
            body.jobDetails.to_spec(),
            rejection_reason=body.rejectionReason,
        ))

    @app.post("/api/getReview")
    def get_review(body: ReviewRequest):
        return _json(service.get_review(
            body.jobId, body.freelancerAddress, body.jobDetails.to_spec(), body.rejectionReason,
        ))

    @app.get("/api/getWorkSubmissions")
    def get_work_submissions(jobId: Optional[str] = None, freelancerAddress: Optional[str] = None):
        return _json(service.list_submissions(jobId, freelancerAddress))

    @app.post("/api/extractJobDetails")
    def extract_job_details(body: ExtractJobRequest):
        return _json(service.extract_job(body.blurb))

    @app.post("/api/generateImage")
    def generate_image(body: GenerateImageRequest):
        try:
            png = service.gig_image(body.title, body.description)
        except ModelInvocationError as e:
            logger.error("Failed to generate image: %s", e)
            return JSONResponse({"error": "Failed to generate image"}, status_code=500)
        return Response(content=png, media_type="image/png")

    return app
