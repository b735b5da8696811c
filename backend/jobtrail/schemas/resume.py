"""
JobTrail Backend — Résumé Schemas
===================================

What:  Pydantic models for résumé uploads and résumé responses.
How:   camelCase on the wire (fileName, fileData, fileType, createdAt, ...),
       snake_case columns underneath. Summaries leave out fileData so a list
       response stays small regardless of how many files a user keeps.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from jobtrail.models.resume import Resume
from jobtrail.timestamps import format_timestamp, parse_timestamp


class ResumeUpload(BaseModel):
    """A résumé as sent by the client for upload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, description="Display name")
    file_name: str = Field(alias="fileName", min_length=1)
    file_data: str = Field(alias="fileData", min_length=1, description="base64 or data: URL")
    file_type: str = Field(alias="fileType", min_length=1, max_length=255)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_optional_timestamps(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        return parse_timestamp(v)


class ResumeActionRequest(BaseModel):
    """
    POST /api/resume-sync body.

    `action` stays a plain string so that an unknown action reaches the route
    and is reported as a malformed request rather than a schema failure.
    `resume` is validated once the action is known: upload needs the full
    record, delete only needs the id.
    """

    action: Optional[str] = None
    resume: Optional[Dict[str, Any]] = None


class ResumeSummary(BaseModel):
    """Résumé metadata without the payload."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    file_name: str = Field(alias="fileName")
    file_type: str = Field(alias="fileType")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    @classmethod
    def from_model(cls, resume: Resume) -> "ResumeSummary":
        return cls(
            id=resume.id,
            name=resume.name,
            file_name=resume.file_name,
            file_type=resume.file_type,
            created_at=resume.created_at,
            updated_at=resume.updated_at,
        )


class ResumeDetail(ResumeSummary):
    """Full résumé including the encoded payload."""

    file_data: str = Field(alias="fileData")

    @classmethod
    def from_model(cls, resume: Resume) -> "ResumeDetail":
        return cls(
            id=resume.id,
            name=resume.name,
            file_name=resume.file_name,
            file_type=resume.file_type,
            file_data=resume.file_data,
            created_at=resume.created_at,
            updated_at=resume.updated_at,
        )


class ResumeListResponse(BaseModel):
    resumes: List[ResumeSummary]


class ResumeFetchResponse(BaseModel):
    resume: ResumeDetail
