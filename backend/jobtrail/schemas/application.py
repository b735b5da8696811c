"""
JobTrail Backend — Application & Sync Schemas
===============================================

What:  Pydantic models for application records on the wire and for the sync
       request/response envelopes.
How:   The camelCase ↔ column mapping is declared once, as Field aliases:

           JSON          column
           ────────────  ────────────
           id            id
           company       company
           position      position
           status        status
           appliedDate   applied_date
           url           url
           notes         notes
           resumeId      resume_id
           createdAt     created_at
           updatedAt     updated_at
           deletedAt     deleted_at

       Inbound timestamps go through parse_timestamp (UTC, millisecond
       precision, offset required); outbound ones through format_timestamp.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from jobtrail.models.application import DEFAULT_STATUS, Application
from jobtrail.timestamps import format_timestamp, parse_timestamp


def _optional_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return parse_timestamp(value)


# ══════════════════════════════════════════════════════════════════════════
# Inbound: what clients send
# ══════════════════════════════════════════════════════════════════════════


class ApplicationFields(BaseModel):
    """Mutable application fields shared by every inbound shape."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    company: str = Field(description="Company name (required)")
    position: str = Field(description="Position title (required)")
    status: Optional[str] = Field(default=DEFAULT_STATUS)
    applied_date: Optional[str] = Field(default=None, alias="appliedDate", max_length=32)
    url: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    resume_id: Optional[str] = Field(default=None, alias="resumeId", max_length=64)

    @field_validator("company", "position")
    @classmethod
    def require_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("applied_date", "url", "notes", "resume_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        # Clients send "" for cleared optional inputs; store those as NULL.
        if v == "":
            return None
        return v

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return DEFAULT_STATUS
        return v


class ApplicationChange(ApplicationFields):
    """
    One proposed record inside a sync push.

    updatedAt is mandatory: it is the value last-write-wins compares.
    createdAt falls back to updatedAt when a client omits it.
    """

    id: str = Field(min_length=1, max_length=64)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    deleted_at: Optional[datetime] = Field(default=None, alias="deletedAt")

    @field_validator("created_at", "deleted_at", mode="before")
    @classmethod
    def parse_optional_timestamps(cls, v: Any) -> Optional[datetime]:
        return _optional_timestamp(v)

    @field_validator("updated_at", mode="before")
    @classmethod
    def parse_updated_at(cls, v: Any) -> datetime:
        return parse_timestamp(v)

    @model_validator(mode="after")
    def fill_created_at(self) -> "ApplicationChange":
        if self.created_at is None:
            self.created_at = self.updated_at
        return self

    def column_values(self) -> Dict[str, Any]:
        """Column name → value for insert/update statements (owner excluded)."""
        return {
            "id": self.id,
            "company": self.company,
            "position": self.position,
            "status": self.status,
            "applied_date": self.applied_date,
            "url": self.url,
            "notes": self.notes,
            "resume_id": self.resume_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }


class ApplicationCreate(ApplicationFields):
    """POST /api/applications and /api/applications/restore body."""

    id: str = Field(min_length=1, max_length=64)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_optional_timestamps(cls, v: Any) -> Optional[datetime]:
        return _optional_timestamp(v)


class ApplicationUpdate(ApplicationFields):
    """PUT /api/applications/{id} body; the id comes from the path."""

    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("updated_at", mode="before")
    @classmethod
    def parse_optional_timestamp(cls, v: Any) -> Optional[datetime]:
        return _optional_timestamp(v)


class SyncPushRequest(BaseModel):
    """
    POST /api/sync body.

    The records inside `changes` stay untyped here. Each one is validated on
    its own by the sync service, so one bad record is rejected without
    failing the rest of the batch.
    """

    model_config = ConfigDict(populate_by_name=True)

    changes: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        description="Client-side application records changed since lastSync",
    )
    last_sync: Optional[str] = Field(
        default=None,
        alias="lastSync",
        description="High-water mark from the previous sync (ISO 8601); omit for a full resync",
    )


# ══════════════════════════════════════════════════════════════════════════
# Outbound: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class ApplicationRecord(BaseModel):
    """Full application record, active or tombstoned."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    company: str
    position: str
    status: str
    applied_date: Optional[str] = Field(default=None, alias="appliedDate")
    url: Optional[str] = None
    notes: Optional[str] = None
    resume_id: Optional[str] = Field(default=None, alias="resumeId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    deleted_at: Optional[datetime] = Field(default=None, alias="deletedAt")

    @field_serializer("created_at", "updated_at", "deleted_at")
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return format_timestamp(value) if value is not None else None

    @classmethod
    def from_model(cls, app: Application) -> "ApplicationRecord":
        return cls(
            id=app.id,
            company=app.company,
            position=app.position,
            status=app.status,
            applied_date=app.applied_date,
            url=app.url,
            notes=app.notes,
            resume_id=app.resume_id,
            created_at=app.created_at,
            updated_at=app.updated_at,
            deleted_at=app.deleted_at,
        )


MergeResult = Literal["inserted", "updated", "discarded", "rejected"]


class MergeOutcome(BaseModel):
    """What happened to one proposed record during a push."""

    id: Optional[str] = Field(default=None, description="Record id, when one could be read")
    result: MergeResult
    reason: Optional[str] = Field(default=None, description="Why a record was discarded or rejected")


class PullResponse(BaseModel):
    """GET /api/sync response."""

    model_config = ConfigDict(populate_by_name=True)

    applications: List[ApplicationRecord]
    server_time: datetime = Field(alias="serverTime")

    @field_serializer("server_time")
    def serialize_server_time(self, value: datetime) -> str:
        return format_timestamp(value)


class PushResponse(PullResponse):
    """POST /api/sync response: the pull after merging, plus per-record outcomes."""

    outcomes: List[MergeOutcome] = Field(default_factory=list)


class ApplicationCreatedResponse(BaseModel):
    success: bool = True
    id: str
