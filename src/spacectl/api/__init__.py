"""Typed clients for the management API's resource families.

Each client wraps a :class:`~spacectl.client.Transport` and maps one
method to one endpoint, returning pydantic models from
:mod:`spacectl.models`.
"""

from spacectl.api.auth import AuthAPI
from spacectl.api.organizations import OrganizationAPI
from spacectl.api.projects import ProjectAPI
from spacectl.api.tenants import TenantAPI

__all__ = ["AuthAPI", "OrganizationAPI", "ProjectAPI", "TenantAPI"]
