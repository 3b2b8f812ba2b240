"""Name-or-ID resolution for command flags.

Commands accept either a human-readable name or an ID for the resource
they act on. IDs are used as-is; names are resolved by listing the
candidates and matching exactly.
"""

from __future__ import annotations

from typing import Optional

from spacectl.api import OrganizationAPI, ProjectAPI, TenantAPI
from spacectl.exceptions import ConfigurationError, SpacectlError
from spacectl.exit_codes import EXIT_NOT_FOUND


def _exactly_one(name: Optional[str], id_: Optional[str], flags: tuple[str, str], what: str) -> None:
    name_flag, id_flag = flags
    if not name and not id_:
        raise ConfigurationError(f"either {name_flag} or {id_flag} must be provided for {what}")
    if name and id_:
        raise ConfigurationError(f"only one of {name_flag} or {id_flag} is allowed for {what}")


def resolve_organization_id(
    orgs: OrganizationAPI,
    name: Optional[str],
    org_id: Optional[str],
    flags: tuple[str, str] = ("--name", "--id"),
) -> str:
    """Return *org_id*, or the ID of the organization called *name*."""
    _exactly_one(name, org_id, flags, "organization")
    if org_id:
        return org_id
    assert name is not None
    try:
        return orgs.get_by_name(name).id
    except SpacectlError as exc:
        raise exc.with_context("failed to resolve organization by name") from exc


def resolve_project_id(
    projects: ProjectAPI,
    name: Optional[str],
    project_id: Optional[str],
    org_id: Optional[str] = None,
    flags: tuple[str, str] = ("--name", "--id"),
) -> str:
    """Return *project_id*, or the ID of the project called *name*.

    When *org_id* is given the search is limited to that organization;
    otherwise all of the caller's projects are searched.
    """
    _exactly_one(name, project_id, flags, "project")
    if project_id:
        return project_id
    if org_id:
        for project in projects.list_organization_projects(org_id):
            if project.name == name:
                return project.id
        raise SpacectlError(f"project named {name!r} not found in organization", EXIT_NOT_FOUND)
    for membership in projects.list_user_projects():
        if membership.project.name == name:
            return membership.project.id
    raise SpacectlError(f"project named {name!r} not found", EXIT_NOT_FOUND)


def resolve_tenant_id(
    tenants: TenantAPI,
    name: Optional[str],
    tenant_id: Optional[str],
    project_id: Optional[str],
    flags: tuple[str, str] = ("--name", "--id"),
) -> str:
    """Return *tenant_id*, or the ID of the tenant called *name* in *project_id*."""
    _exactly_one(name, tenant_id, flags, "tenant")
    if tenant_id:
        return tenant_id
    if not project_id:
        raise ConfigurationError("a project is required to resolve a tenant by name")
    for tenant in tenants.list_project_tenants(project_id):
        if tenant.name == name:
            return tenant.id
    raise SpacectlError(f"tenant named {name!r} not found in project", EXIT_NOT_FOUND)


def optional_project_id(
    projects: ProjectAPI,
    project_id: Optional[str],
    project_name: Optional[str],
) -> Optional[str]:
    """Resolve a ``--project`` / ``--project-name`` pair where both may be absent."""
    if project_id and project_name:
        raise ConfigurationError("only one of --project or --project-name is allowed")
    if project_name:
        return resolve_project_id(
            projects, project_name, None, flags=("--project-name", "--project")
        )
    return project_id
