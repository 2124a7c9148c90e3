"""Pydantic models shared by the RBAC and ABAC layers."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    """Closed set of subject classes. Any plain string is accepted by the core."""

    admin = "admin"
    instructor = "instructor"
    student = "student"


class Permission(str, Enum):
    """Action catalogue. Values are the opaque identifiers checked by RBAC."""

    create_internship = "internship:create"
    update_internship = "internship:update"
    delete_internship = "internship:delete"
    view_internship = "internship:view"
    publish_internship = "internship:publish"

    view_lectures = "content:lectures:view"
    view_assignments = "content:assignments:view"
    view_resources = "content:resources:view"
    download_content = "content:download"

    manage_users = "users:manage"
    view_all_users = "users:view:all"

    system_config = "system:config"
    view_analytics = "analytics:view"


def as_str(value: str | Enum) -> str:
    """Plain string value of a role, permission or any str-backed enum."""
    if isinstance(value, Enum):
        return str(value.value)
    return value


class AuthContext(BaseModel):
    """The authenticated subject of a request.

    ``attributes`` is an open bag filled by the caller and then by attribute
    providers (``enrolled_internships``, ``progress``, ...).
    """

    user_id: str
    email: str = ""
    phone: str = ""
    role: str
    attributes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("role", mode="before")
    @classmethod
    def _plain_role(cls, v: Any) -> Any:
        return as_str(v) if isinstance(v, Enum) else v


class Resource(BaseModel):
    """The thing being acted on."""

    type: str
    id: str = ""
    attributes: dict[str, Any] = Field(default_factory=dict)


class AccessRequest(BaseModel):
    """Unit of evaluation, built fresh for every authorization check."""

    subject: AuthContext
    resource: Resource
    action: str
    context: dict[str, Any] = Field(default_factory=dict)

    @field_validator("action", mode="before")
    @classmethod
    def _plain_action(cls, v: Any) -> Any:
        return as_str(v) if isinstance(v, Enum) else v


class Decision(BaseModel):
    """Verdict of a single policy or of the whole engine."""

    allow: bool
    reason: str = ""
    priority: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)


class CachedDecision(BaseModel):
    """A decision with an absolute expiry."""

    decision: Decision
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
