"""Tenant endpoints and the placement catalogue (clouds, regions, zones, versions)."""

from __future__ import annotations

from spacectl.client.response import handle_response, handle_text_response
from spacectl.client.transport import Transport
from spacectl.models import (
    CreateTenantRequest,
    KubernetesVersion,
    Location,
    Tenant,
    TenantStatus,
    UpdateTenantRequest,
)

_BASE = "/api/v1/tenants"


class TenantAPI:
    """Client for ``/api/v1/tenants`` and project-scoped tenant routes.

    Args:
        transport: An open :class:`~spacectl.client.Transport`.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def list_project_tenants(self, project_id: str) -> list[Tenant]:
        response = self._transport.execute("GET", f"/api/v1/projects/{project_id}/tenants")
        return handle_response(response, list[Tenant])

    def get(self, tenant_id: str) -> Tenant:
        return handle_response(self._transport.execute("GET", f"{_BASE}/{tenant_id}"), Tenant)

    def create(self, project_id: str, request: CreateTenantRequest) -> Tenant:
        response = self._transport.execute(
            "POST", f"/api/v1/projects/{project_id}/tenants", request
        )
        return handle_response(response, Tenant)

    def update(self, tenant_id: str, request: UpdateTenantRequest) -> Tenant:
        """Apply a partial update; fields left as ``None`` are not sent."""
        response = self._transport.execute("PATCH", f"{_BASE}/{tenant_id}", request)
        return handle_response(response, Tenant)

    def delete(self, tenant_id: str) -> None:
        handle_response(self._transport.execute("DELETE", f"{_BASE}/{tenant_id}"))

    def get_status(self, tenant_id: str) -> TenantStatus:
        response = self._transport.execute("GET", f"{_BASE}/{tenant_id}/status")
        return handle_response(response, TenantStatus)

    def get_kubeconfig(self, tenant_id: str) -> str:
        """Return the tenant's kubeconfig as raw YAML text."""
        response = self._transport.execute("GET", f"{_BASE}/{tenant_id}/kubeconfig")
        return handle_text_response(response)

    # --- Placement catalogue ---

    def list_locations(self) -> list[Location]:
        return handle_response(self._transport.execute("GET", f"{_BASE}/locations"), list[Location])

    def list_clouds(self) -> list[str]:
        return handle_response(self._transport.execute("GET", f"{_BASE}/clouds"), list[str])

    def list_regions(self, cloud_provider: str) -> list[str]:
        response = self._transport.execute(
            "GET", f"{_BASE}/regions", params={"cloud_provider": cloud_provider}
        )
        return handle_response(response, list[str])

    def list_zones(self, cloud_provider: str, region: str) -> list[str]:
        response = self._transport.execute(
            "GET",
            f"{_BASE}/zones",
            params={"cloud_provider": cloud_provider, "region": region},
        )
        return handle_response(response, list[str])

    def list_kubernetes_versions(self) -> list[KubernetesVersion]:
        response = self._transport.execute("GET", f"{_BASE}/kubernetes-versions")
        return handle_response(response, list[KubernetesVersion])
