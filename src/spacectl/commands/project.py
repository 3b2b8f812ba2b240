"""Project commands.

Provides the ``spacectl project`` sub-command group with the ``members``
and ``invitations`` sub-groups. Projects are addressed by
``--project-name`` or ``--project-id``; names are matched against the
projects you are a member of.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import typer

from spacectl.api import OrganizationAPI, ProjectAPI, TenantAPI
from spacectl.commands.resolver import resolve_organization_id, resolve_project_id
from spacectl.context import confirm_or_abort, exits_on_error, get_context
from spacectl.exceptions import ConfigurationError, SpacectlError
from spacectl.models import (
    CreateProjectRequest,
    Project,
    UpdateProjectQuotasRequest,
    UpdateProjectRequest,
)
from spacectl.output import success, warning

logger = logging.getLogger(__name__)

project_app = typer.Typer(no_args_is_help=True)
members_app = typer.Typer(no_args_is_help=True)
invitations_app = typer.Typer(no_args_is_help=True)

project_app.add_typer(members_app, name="members", help="Manage project members.")
project_app.add_typer(invitations_app, name="invitations", help="Manage project invitations.")

_ORG_FLAGS = ("--org-name", "--org-id")
_PROJECT_FLAGS = ("--project-name", "--project-id")


def _org_id_or_default(orgs: OrganizationAPI, org_name: Optional[str], org_id: Optional[str]) -> str:
    if org_name or org_id:
        return resolve_organization_id(orgs, org_name, org_id, _ORG_FLAGS)
    try:
        return orgs.get_default().id
    except SpacectlError as exc:
        raise exc.with_context("failed to get default organization") from exc


def _tenant_count(tenants: TenantAPI, project_id: str) -> int:
    try:
        return len(tenants.list_project_tenants(project_id))
    except SpacectlError as exc:
        logger.debug("Could not count tenants of project %s: %s", project_id, exc)
        return 0


def _project_rows(
    projects: list[Project],
    roles: dict[str, str],
    tenants: TenantAPI,
) -> list[dict[str, Any]]:
    return [
        {
            "name": project.name,
            "role": roles.get(project.id, ""),
            "tenant_count": _tenant_count(tenants, project.id),
        }
        for project in projects
    ]


@project_app.command("list")
@exits_on_error
def project_list(
    ctx: typer.Context,
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
    all_orgs: bool = typer.Option(False, "--all", help="List projects of every organization."),
) -> None:
    """List projects with your role and their tenant count.

    Without options the default organization is listed. ``--all`` adds an
    ``organization`` column and walks every organization you belong to;
    organizations whose projects cannot be listed are skipped.
    """
    cli = get_context(ctx)
    cli.require_auth()
    if all_orgs and (org_name or org_id):
        raise ConfigurationError("--all cannot be combined with --org-name or --org-id")

    with cli.transport() as transport:
        orgs = OrganizationAPI(transport)
        projects = ProjectAPI(transport)
        tenants = TenantAPI(transport)
        try:
            roles = {m.project.id: m.role for m in projects.list_user_projects()}
        except SpacectlError as exc:
            raise exc.with_context("failed to list projects") from exc

        if not all_orgs:
            resolved = _org_id_or_default(orgs, org_name, org_id)
            try:
                org_projects = projects.list_organization_projects(resolved)
            except SpacectlError as exc:
                raise exc.with_context("failed to list projects") from exc
            cli.render(_project_rows(org_projects, roles, tenants))
            return

        try:
            memberships = orgs.list_user_organizations()
        except SpacectlError as exc:
            raise exc.with_context("failed to list organizations") from exc
        rows: list[dict[str, Any]] = []
        for membership in memberships:
            org = membership.organization
            try:
                org_projects = projects.list_organization_projects(org.id)
            except SpacectlError as exc:
                warning(f"Skipping organization {org.name}: {exc}")
                continue
            for row in _project_rows(org_projects, roles, tenants):
                rows.append({"organization": org.name, **row})
    cli.render(rows)


@project_app.command("create")
@exits_on_error
def project_create(
    ctx: typer.Context,
    name: str = typer.Argument(help="Project name."),
    description: Optional[str] = typer.Option(None, "--description", help="Description."),
    max_tenants: int = typer.Option(0, "--max-tenants", help="Tenant limit (0 = server default)."),
    max_compute: int = typer.Option(0, "--max-compute", help="Total compute cores."),
    max_memory: int = typer.Option(0, "--max-memory", help="Total memory in GB."),
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
) -> None:
    """Create a project in an organization (the default one if omitted)."""
    cli = get_context(ctx)
    cli.require_auth()
    request = CreateProjectRequest(
        name=name,
        description=description,
        max_tenants=max_tenants,
        max_compute=max_compute,
        max_memory_gb=max_memory,
    )
    with cli.transport() as transport:
        resolved = _org_id_or_default(OrganizationAPI(transport), org_name, org_id)
        try:
            project = ProjectAPI(transport).create(resolved, request)
        except SpacectlError as exc:
            raise exc.with_context("failed to create project") from exc
    success(f"Project {project.name} created")
    cli.render(project)


@project_app.command("get")
@exits_on_error
def project_get(
    ctx: typer.Context,
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
) -> None:
    """Show one project."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            project = api.get(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to get project") from exc
    cli.render(project)


@project_app.command("update")
@exits_on_error
def project_update(
    ctx: typer.Context,
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
    name: Optional[str] = typer.Option(None, "--name", help="New project name."),
    description: Optional[str] = typer.Option(None, "--description", help="New description."),
    max_tenants: Optional[int] = typer.Option(None, "--max-tenants", help="New tenant limit."),
    max_compute: Optional[int] = typer.Option(None, "--max-compute", help="New compute cores."),
    max_memory: Optional[int] = typer.Option(None, "--max-memory", help="New memory in GB."),
) -> None:
    """Update a project. Omitted options keep their current values."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            current = api.get(resolved)
            request = UpdateProjectRequest(
                name=name if name is not None else current.name,
                description=description if description is not None else current.description,
                max_tenants=max_tenants if max_tenants is not None else current.max_tenants,
                max_compute=max_compute if max_compute is not None else current.max_compute,
                max_memory_gb=max_memory if max_memory is not None else current.max_memory_gb,
            )
            project = api.update(resolved, request)
        except SpacectlError as exc:
            raise exc.with_context("failed to update project") from exc
    success(f"Project {project.name} updated")
    cli.render(project)


@project_app.command("quotas")
@exits_on_error
def project_quotas(
    ctx: typer.Context,
    max_tenants: int = typer.Option(..., "--max-tenants", help="Tenant limit."),
    max_compute: int = typer.Option(..., "--max-compute", help="Total compute cores."),
    max_memory: int = typer.Option(..., "--max-memory", help="Total memory in GB."),
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
) -> None:
    """Set a project's tenant and resource quotas."""
    cli = get_context(ctx)
    cli.require_auth()
    request = UpdateProjectQuotasRequest(
        max_tenants=max_tenants, max_compute=max_compute, max_memory_gb=max_memory
    )
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            project = api.update_quotas(resolved, request)
        except SpacectlError as exc:
            raise exc.with_context("failed to update project quotas") from exc
    success(f"Quotas of project {project.name} updated")
    cli.render(project)


@project_app.command("delete")
@exits_on_error
def project_delete(
    ctx: typer.Context,
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Delete a project and all of its tenants."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        confirm_or_abort(f"Delete project {project_name or resolved}?", force)
        try:
            api.delete(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to delete project") from exc
    success(f"Project {project_name or resolved} deleted")


# ------------------------------------------------------------------ #
# Members
# ------------------------------------------------------------------ #


@members_app.command("list")
@exits_on_error
def project_members_list(
    ctx: typer.Context,
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
) -> None:
    """List the members of a project."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            members = api.list_members(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to list project members") from exc
    cli.render(members)


@members_app.command("add")
@exits_on_error
def project_members_add(
    ctx: typer.Context,
    user_id: str = typer.Option(..., "--user-id", help="User to add."),
    role: str = typer.Option("member", "--role", help="Role: admin or member."),
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
) -> None:
    """Add a user to a project."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            api.add_member(resolved, user_id, role)
        except SpacectlError as exc:
            raise exc.with_context("failed to add project member") from exc
    success(f"User {user_id} added as {role}")


@members_app.command("remove")
@exits_on_error
def project_members_remove(
    ctx: typer.Context,
    user_id: str = typer.Option(..., "--user-id", help="User to remove."),
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Remove a user from a project."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        confirm_or_abort(f"Remove user {user_id} from the project?", force)
        try:
            api.remove_member(resolved, user_id)
        except SpacectlError as exc:
            raise exc.with_context("failed to remove project member") from exc
    success(f"User {user_id} removed")


@members_app.command("set-role")
@exits_on_error
def project_members_set_role(
    ctx: typer.Context,
    user_id: str = typer.Option(..., "--user-id", help="Member whose role changes."),
    role: str = typer.Option(..., "--role", help="New role: admin or member."),
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
) -> None:
    """Change a project member's role."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            api.change_member_role(resolved, user_id, role)
        except SpacectlError as exc:
            raise exc.with_context("failed to change project member role") from exc
    success(f"User {user_id} is now {role}")


# ------------------------------------------------------------------ #
# Invitations
# ------------------------------------------------------------------ #


@invitations_app.command("send")
@exits_on_error
def project_invitations_send(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Email address to invite."),
    role: str = typer.Option("member", "--role", help="Role: admin or member."),
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
) -> None:
    """Invite someone to a project by email."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            api.create_invitation(resolved, email, role)
        except SpacectlError as exc:
            raise exc.with_context("failed to send invitation") from exc
    success(f"Invitation sent to {email}")


@invitations_app.command("list")
@exits_on_error
def project_invitations_list(
    ctx: typer.Context,
    project_name: Optional[str] = typer.Option(None, "--project-name", help="Project name."),
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project ID."),
) -> None:
    """List invitations sent from a project."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = ProjectAPI(transport)
        resolved = resolve_project_id(api, project_name, project_id, flags=_PROJECT_FLAGS)
        try:
            invitations = api.list_invitations(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to list invitations") from exc
    cli.render(invitations)


@invitations_app.command("mine")
@exits_on_error
def project_invitations_mine(ctx: typer.Context) -> None:
    """List project invitations addressed to you."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            invitations = ProjectAPI(transport).list_user_invitations()
    except SpacectlError as exc:
        raise exc.with_context("failed to list invitations") from exc
    cli.render(invitations)


@invitations_app.command("accept")
@exits_on_error
def project_invitations_accept(
    ctx: typer.Context,
    invitation_id: str = typer.Argument(help="Invitation ID."),
) -> None:
    """Accept a project invitation."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            ProjectAPI(transport).accept_invitation(invitation_id)
    except SpacectlError as exc:
        raise exc.with_context("failed to accept invitation") from exc
    success("Invitation accepted")


@invitations_app.command("decline")
@exits_on_error
def project_invitations_decline(
    ctx: typer.Context,
    invitation_id: str = typer.Argument(help="Invitation ID."),
) -> None:
    """Decline a project invitation."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            ProjectAPI(transport).decline_invitation(invitation_id)
    except SpacectlError as exc:
        raise exc.with_context("failed to decline invitation") from exc
    success("Invitation declined")
