from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.domain.entities import Record


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Users ---
class UserResponse(ApiModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    username: str
    company_name: str
    business_type: str | None = None
    web_link: str | None = None
    logo: str | None = None
    created_at: datetime


class RegisterRequest(ApiModel):
    username: str
    password: str
    company_name: str
    business_type: str | None = None
    web_link: str | None = None
    logo: str | None = None


class LoginRequest(ApiModel):
    username: str
    password: str


class ProfileUpdateRequest(ApiModel):
    company_name: str | None = None
    business_type: str | None = None
    web_link: str | None = None
    logo: str | None = None


class ChangePasswordRequest(ApiModel):
    current_password: str
    new_password: str


class MessageResponse(BaseModel):
    message: str


# --- Records ---
def record_to_wire(record: Record) -> dict[str, Any]:
    """JSON-ready camelCase dict for any stored record."""
    return record.model_dump(by_alias=True, mode="json")
