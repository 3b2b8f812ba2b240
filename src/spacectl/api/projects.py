"""Project endpoints, including quotas, members and invitations."""

from __future__ import annotations

from spacectl.client.response import handle_response
from spacectl.client.transport import Transport
from spacectl.models import (
    AddUserRequest,
    ChangeRoleRequest,
    CreateInvitationRequest,
    CreateProjectRequest,
    Project,
    ProjectInvitation,
    ProjectMember,
    ProjectMembership,
    UpdateProjectQuotasRequest,
    UpdateProjectRequest,
)

_BASE = "/api/v1/projects"


class ProjectAPI:
    """Client for ``/api/v1/projects`` and organization-scoped project routes.

    Args:
        transport: An open :class:`~spacectl.client.Transport`.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def list_organization_projects(self, org_id: str) -> list[Project]:
        response = self._transport.execute("GET", f"/api/v1/organizations/{org_id}/projects")
        return handle_response(response, list[Project])

    def list_user_projects(self) -> list[ProjectMembership]:
        """Return every project the caller is a member of, across organizations."""
        return handle_response(self._transport.execute("GET", _BASE), list[ProjectMembership])

    def get(self, project_id: str) -> Project:
        return handle_response(self._transport.execute("GET", f"{_BASE}/{project_id}"), Project)

    def create(self, org_id: str, request: CreateProjectRequest) -> Project:
        response = self._transport.execute(
            "POST", f"/api/v1/organizations/{org_id}/projects", request
        )
        return handle_response(response, Project)

    def update(self, project_id: str, request: UpdateProjectRequest) -> Project:
        response = self._transport.execute("PUT", f"{_BASE}/{project_id}", request)
        return handle_response(response, Project)

    def update_quotas(self, project_id: str, request: UpdateProjectQuotasRequest) -> Project:
        response = self._transport.execute("PATCH", f"{_BASE}/{project_id}/quotas", request)
        return handle_response(response, Project)

    def delete(self, project_id: str) -> None:
        handle_response(self._transport.execute("DELETE", f"{_BASE}/{project_id}"))

    # --- Members ---

    def list_members(self, project_id: str) -> list[ProjectMember]:
        response = self._transport.execute("GET", f"{_BASE}/{project_id}/users")
        return handle_response(response, list[ProjectMember])

    def add_member(self, project_id: str, user_id: str, role: str) -> None:
        response = self._transport.execute(
            "POST", f"{_BASE}/{project_id}/users", AddUserRequest(user_id=user_id, role=role)
        )
        handle_response(response)

    def remove_member(self, project_id: str, user_id: str) -> None:
        response = self._transport.execute("DELETE", f"{_BASE}/{project_id}/users/{user_id}")
        handle_response(response)

    def change_member_role(self, project_id: str, user_id: str, role: str) -> None:
        response = self._transport.execute(
            "PATCH", f"{_BASE}/{project_id}/users/{user_id}/role", ChangeRoleRequest(role=role)
        )
        handle_response(response)

    # --- Invitations ---

    def create_invitation(self, project_id: str, email: str, role: str) -> None:
        response = self._transport.execute(
            "POST",
            f"{_BASE}/{project_id}/invitations",
            CreateInvitationRequest(email=email, role=role),
        )
        handle_response(response)

    def list_invitations(self, project_id: str) -> list[ProjectInvitation]:
        response = self._transport.execute("GET", f"{_BASE}/{project_id}/invitations")
        return handle_response(response, list[ProjectInvitation])

    def list_user_invitations(self) -> list[ProjectInvitation]:
        """Return project invitations addressed to the caller."""
        response = self._transport.execute("GET", f"{_BASE}/invitations")
        return handle_response(response, list[ProjectInvitation])

    def accept_invitation(self, invitation_id: str) -> None:
        response = self._transport.execute("POST", f"{_BASE}/invitations/{invitation_id}/accept")
        handle_response(response)

    def decline_invitation(self, invitation_id: str) -> None:
        response = self._transport.execute("POST", f"{_BASE}/invitations/{invitation_id}/decline")
        handle_response(response)
