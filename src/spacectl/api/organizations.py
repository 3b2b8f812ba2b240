"""Organization endpoints, including membership and invitations."""

from __future__ import annotations

from typing import Optional

from spacectl.client.response import handle_response
from spacectl.client.transport import Transport
from spacectl.models import (
    AddUserRequest,
    ChangeRoleRequest,
    CreateInvitationRequest,
    CreateOrganizationRequest,
    Invitation,
    Organization,
    OrganizationMembership,
    UpdateOrganizationRequest,
)

_BASE = "/api/v1/organizations"


class OrganizationAPI:
    """Client for ``/api/v1/organizations``.

    Args:
        transport: An open :class:`~spacectl.client.Transport`.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def list_user_organizations(self) -> list[OrganizationMembership]:
        """Return every organization the caller belongs to, with role and default flag."""
        response = self._transport.execute("GET", _BASE)
        return handle_response(response, list[OrganizationMembership])

    def get_default(self) -> Organization:
        return handle_response(self._transport.execute("GET", f"{_BASE}/default"), Organization)

    def get_by_name(self, name: str) -> Organization:
        response = self._transport.execute("GET", f"{_BASE}/by-name/{name}")
        return handle_response(response, Organization)

    def get(self, org_id: str) -> Organization:
        return handle_response(self._transport.execute("GET", f"{_BASE}/{org_id}"), Organization)

    def create(self, name: str, description: Optional[str] = None) -> Organization:
        response = self._transport.execute(
            "POST", _BASE, CreateOrganizationRequest(name=name, description=description)
        )
        return handle_response(response, Organization)

    def update(self, org_id: str, name: str) -> Organization:
        response = self._transport.execute(
            "PUT", f"{_BASE}/{org_id}", UpdateOrganizationRequest(name=name)
        )
        return handle_response(response, Organization)

    def delete(self, org_id: str) -> None:
        handle_response(self._transport.execute("DELETE", f"{_BASE}/{org_id}"))

    def set_default(self, org_id: str) -> None:
        """Make *org_id* the caller's default organization."""
        handle_response(self._transport.execute("PUT", f"{_BASE}/{org_id}/default"))

    # --- Members ---

    def add_user(self, org_id: str, user_id: str, role: str) -> None:
        response = self._transport.execute(
            "POST", f"{_BASE}/{org_id}/users", AddUserRequest(user_id=user_id, role=role)
        )
        handle_response(response)

    def remove_user(self, org_id: str, user_id: str) -> None:
        handle_response(self._transport.execute("DELETE", f"{_BASE}/{org_id}/users/{user_id}"))

    def change_user_role(self, org_id: str, user_id: str, role: str) -> None:
        response = self._transport.execute(
            "PATCH", f"{_BASE}/{org_id}/users/{user_id}/role", ChangeRoleRequest(role=role)
        )
        handle_response(response)

    # --- Invitations ---

    def create_invitation(self, org_id: str, email: str, role: str) -> None:
        response = self._transport.execute(
            "POST",
            f"{_BASE}/{org_id}/invitations",
            CreateInvitationRequest(email=email, role=role),
        )
        handle_response(response)

    def list_invitations(self, org_id: str) -> list[Invitation]:
        """Return invitations sent from *org_id*."""
        response = self._transport.execute("GET", f"{_BASE}/{org_id}/invitations")
        return handle_response(response, list[Invitation])

    def list_user_invitations(self) -> list[Invitation]:
        """Return invitations addressed to the caller."""
        response = self._transport.execute("GET", f"{_BASE}/invitations")
        return handle_response(response, list[Invitation])

    def accept_invitation(self, invitation_id: str) -> None:
        response = self._transport.execute("POST", f"{_BASE}/invitations/{invitation_id}/accept")
        handle_response(response)

    def decline_invitation(self, invitation_id: str) -> None:
        response = self._transport.execute("POST", f"{_BASE}/invitations/{invitation_id}/decline")
        handle_response(response)
