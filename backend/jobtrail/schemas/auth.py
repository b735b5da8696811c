"""
JobTrail Backend — Account Schemas
====================================

What:  Request/response models for register, login and the combined auth call.
How:   Format rules (username length, 4-digit PIN) are checked by the account
       service so that failures come back as validation_error with a readable
       message; the schema only guarantees both fields are strings.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CredentialsRequest(BaseModel):
    """Body of POST /api/register, /api/login and /api/auth."""

    username: str = Field(default="", description="At least 3 characters, case-insensitive")
    pin: str = Field(default="", description="Exactly 4 digits")
    action: Optional[str] = Field(
        default=None,
        description="/api/auth only: 'register' registers, anything else logs in",
    )


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    user_id: str = Field(alias="userId")
