"""Request bodies accepted by the HTTP API."""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .models import JobSpec


class JobDetails(BaseModel):
    title: str
    description: str
    requirements: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)

    def to_spec(self) -> JobSpec:
        return JobSpec.from_dict(self.model_dump())


class QualityCheckRequest(BaseModel):
    work: str = Field(..., min_length=1)
    jobDetails: JobDetails
    jobId: Union[int, str]


class SubmitWorkRequest(BaseModel):
    jobId: str = Field(..., min_length=1)
    freelancerAddress: str = Field(..., min_length=1)
    work: str = Field(..., min_length=1)
    jobDetails: JobDetails


class EmployerActionRequest(BaseModel):
    jobId: str = Field(..., min_length=1)
    freelancerAddress: str = Field(..., min_length=1)
    action: str
    rejectionReason: Optional[str] = None
    jobDetails: JobDetails


class ReviewRequest(BaseModel):
    jobId: str = Field(..., min_length=1)
    freelancerAddress: str = Field(..., min_length=1)
    rejectionReason: str = Field(..., min_length=1)
    jobDetails: JobDetails


class ExtractJobRequest(BaseModel):
    blurb: str = Field(..., min_length=1)


class GenerateImageRequest(BaseModel):
    title: str
    description: str
