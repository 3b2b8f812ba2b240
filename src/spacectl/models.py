"""Pydantic models for the management API's JSON payloads.

This is the single source of truth for wire shapes. The models fall into
two groups:

**Resources** -- decoded from 2xx response bodies:
    :class:`User`, :class:`Organization`, :class:`OrganizationMembership`,
    :class:`Project`, :class:`ProjectMembership`, :class:`ProjectMember`,
    :class:`Tenant`, :class:`TenantStatus`, :class:`Invitation`,
    :class:`ProjectInvitation`, :class:`Location`,
    :class:`KubernetesVersion`, :class:`LoginResponse`.

**Requests** -- serialised as request bodies by the resource clients.
Optional request fields left as ``None`` are omitted from the body.

Field declaration order is the JSON/YAML output order, so keep it aligned
with the API's own field order when adding fields.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# --- Users and auth ---


class UserPreferences(BaseModel):
    """UI preferences stored server-side for a user."""

    welcome_dismissed: bool = False
    theme: str = ""


class User(BaseModel):
    """An API user as returned by ``GET /api/v1/user/info``."""

    id: str
    email: str
    provider: str = Field(default="", description="Identity provider: local, github, ...")
    approved: bool = False
    email_verified: bool = False
    is_admin: bool = False
    preferences: Optional[UserPreferences] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    """Token pair issued by the login and refresh endpoints."""

    access_token: str
    refresh_token: str
    user: User


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class VerifyEmailRequest(BaseModel):
    email: str
    code: str


class ResendVerificationRequest(BaseModel):
    email: str


# --- Organizations ---


class Organization(BaseModel):
    """A top-level organization."""

    id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrganizationMembership(BaseModel):
    """The caller's membership in an organization, as listed by ``org list``."""

    organization: Organization
    role: str
    is_default: bool = False


class Invitation(BaseModel):
    """A pending invitation to join an organization."""

    id: str
    organization: Optional[Organization] = None
    inviter_user_id: str = ""
    invitee_email: str
    role: str
    status: str = ""
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CreateOrganizationRequest(BaseModel):
    name: str
    description: Optional[str] = None


class UpdateOrganizationRequest(BaseModel):
    name: str


class AddUserRequest(BaseModel):
    """Body for adding a user to an organization or a project."""

    user_id: str
    role: str


class ChangeRoleRequest(BaseModel):
    """Body for changing a member's role in an organization or a project."""

    role: str


class CreateInvitationRequest(BaseModel):
    """Body for inviting a user by email to an organization or a project."""

    email: str
    role: str


# --- Projects ---


class Project(BaseModel):
    """A project inside an organization, carrying tenant quotas."""

    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    max_tenants: int = 0
    max_compute: int = 0
    max_memory_gb: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectMembership(BaseModel):
    """The caller's membership in a project."""

    project: Project
    role: str
    created_at: Optional[datetime] = None


class ProjectMember(BaseModel):
    """A user's membership row as listed by ``project members list``."""

    user_id: str
    project_id: str
    role: str
    created_at: Optional[datetime] = None


class ProjectInvitation(BaseModel):
    """A pending invitation to join a project."""

    id: str
    project: Optional[Project] = None
    organization_id: str = ""
    inviter_user_id: str = ""
    invitee_email: str
    role: str
    status: str = ""
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CreateProjectRequest(BaseModel):
    name: str
    description: Optional[str] = None
    max_tenants: int = 0
    max_compute: int = 0
    max_memory_gb: int = 0


class UpdateProjectRequest(BaseModel):
    name: str
    description: Optional[str] = None
    max_tenants: int = 0
    max_compute: int = 0
    max_memory_gb: int = 0


class UpdateProjectQuotasRequest(BaseModel):
    max_tenants: int
    max_compute: int
    max_memory_gb: int


# --- Tenants ---


class Tenant(BaseModel):
    """A virtual Kubernetes cluster running on a host cluster."""

    id: str
    project_id: str = ""
    organization_id: str = ""
    host_cluster_id: str = ""
    name: str
    cloud_provider: str = ""
    region: str = ""
    location_short: str = ""
    kubernetes_version: str = ""
    compute_quota: int = 0
    memory_quota_gb: int = 0
    status: str = ""
    namespace: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TenantStatus(BaseModel):
    """Provisioning status of a tenant."""

    id: str
    name: str
    status: str
    namespace: str = ""
    cloud_provider: str = ""
    region: str = ""
    kubernetes_version: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Location(BaseModel):
    """A cloud/region/zone triple a tenant can be placed in."""

    cloud_provider: str
    region: str
    zone: str


class KubernetesVersion(BaseModel):
    version: str
    is_default: bool = False


class CreateTenantRequest(BaseModel):
    name: str
    cloud_provider: str
    region: str
    kubernetes_version: str
    compute_quota: int
    memory_quota_gb: int
    namespace_suffix: Optional[str] = None


class UpdateTenantRequest(BaseModel):
    """Partial tenant update; ``None`` fields are left unchanged server-side."""

    kubernetes_version: Optional[str] = None
    compute_quota: Optional[int] = None
    memory_quota_gb: Optional[int] = None
