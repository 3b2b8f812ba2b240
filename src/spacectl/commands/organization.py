"""Organization commands.

Provides the ``spacectl org`` sub-command group with the ``members`` and
``invitations`` sub-groups. Organizations are addressed by ``--name`` or
``--id``; exactly one of the two is required.

Example::

    spacectl org create acme
    spacectl org set-default --name acme
    spacectl org members add --org-name acme --user-id u-42 --role admin
    spacectl org invitations send --org-name acme --email dev@example.com
"""

from __future__ import annotations

from typing import Optional

import typer

from spacectl.api import OrganizationAPI
from spacectl.commands.resolver import resolve_organization_id
from spacectl.context import confirm_or_abort, exits_on_error, get_context
from spacectl.exceptions import SpacectlError
from spacectl.output import success


org_app = typer.Typer(no_args_is_help=True)
members_app = typer.Typer(no_args_is_help=True)
invitations_app = typer.Typer(no_args_is_help=True)

org_app.add_typer(members_app, name="members", help="Manage organization members.")
org_app.add_typer(invitations_app, name="invitations", help="Manage organization invitations.")

_ORG_FLAGS = ("--org-name", "--org-id")


@org_app.command("list")
@exits_on_error
def org_list(ctx: typer.Context) -> None:
    """List your organizations with your role and the default flag."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            memberships = OrganizationAPI(transport).list_user_organizations()
    except SpacectlError as exc:
        raise exc.with_context("failed to list organizations") from exc
    cli.render(memberships)


@org_app.command("create")
@exits_on_error
def org_create(
    ctx: typer.Context,
    name: str = typer.Argument(help="Organization name."),
    description: Optional[str] = typer.Option(None, "--description", help="Description."),
) -> None:
    """Create an organization."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            org = OrganizationAPI(transport).create(name, description)
    except SpacectlError as exc:
        raise exc.with_context("failed to create organization") from exc
    success(f"Organization {org.name} created")
    cli.render(org)


@org_app.command("get")
@exits_on_error
def org_get(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--id", help="Organization ID."),
) -> None:
    """Show one organization."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, name, org_id)
        try:
            org = api.get(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to get organization") from exc
    cli.render(org)


@org_app.command("update")
@exits_on_error
def org_update(
    ctx: typer.Context,
    new_name: str = typer.Option(..., "--name", help="New organization name."),
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Current organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
) -> None:
    """Rename an organization."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, org_name, org_id, _ORG_FLAGS)
        try:
            org = api.update(resolved, new_name)
        except SpacectlError as exc:
            raise exc.with_context("failed to update organization") from exc
    success(f"Organization renamed to {org.name}")
    cli.render(org)


@org_app.command("delete")
@exits_on_error
def org_delete(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--id", help="Organization ID."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Delete an organization and everything in it."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, name, org_id)
        confirm_or_abort(f"Delete organization {name or resolved}?", force)
        try:
            api.delete(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to delete organization") from exc
    success(f"Organization {name or resolved} deleted")


@org_app.command("set-default")
@exits_on_error
def org_set_default(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--id", help="Organization ID."),
) -> None:
    """Make an organization your default."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, name, org_id)
        try:
            api.set_default(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to set default organization") from exc
    success(f"Default organization set to {name or resolved}")


# ------------------------------------------------------------------ #
# Members
# ------------------------------------------------------------------ #


@members_app.command("add")
@exits_on_error
def org_members_add(
    ctx: typer.Context,
    user_id: str = typer.Option(..., "--user-id", help="User to add."),
    role: str = typer.Option("member", "--role", help="Role: admin or member."),
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
) -> None:
    """Add a user to an organization."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, org_name, org_id, _ORG_FLAGS)
        try:
            api.add_user(resolved, user_id, role)
        except SpacectlError as exc:
            raise exc.with_context("failed to add user") from exc
    success(f"User {user_id} added as {role}")


@members_app.command("remove")
@exits_on_error
def org_members_remove(
    ctx: typer.Context,
    user_id: str = typer.Option(..., "--user-id", help="User to remove."),
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Remove a user from an organization."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, org_name, org_id, _ORG_FLAGS)
        confirm_or_abort(f"Remove user {user_id} from the organization?", force)
        try:
            api.remove_user(resolved, user_id)
        except SpacectlError as exc:
            raise exc.with_context("failed to remove user") from exc
    success(f"User {user_id} removed")


@members_app.command("set-role")
@exits_on_error
def org_members_set_role(
    ctx: typer.Context,
    user_id: str = typer.Option(..., "--user-id", help="Member whose role changes."),
    role: str = typer.Option(..., "--role", help="New role: admin or member."),
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
) -> None:
    """Change a member's role."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, org_name, org_id, _ORG_FLAGS)
        try:
            api.change_user_role(resolved, user_id, role)
        except SpacectlError as exc:
            raise exc.with_context("failed to change user role") from exc
    success(f"User {user_id} is now {role}")


# ------------------------------------------------------------------ #
# Invitations
# ------------------------------------------------------------------ #


@invitations_app.command("send")
@exits_on_error
def org_invitations_send(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Email address to invite."),
    role: str = typer.Option("member", "--role", help="Role: admin or member."),
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
) -> None:
    """Invite someone to an organization by email."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, org_name, org_id, _ORG_FLAGS)
        try:
            api.create_invitation(resolved, email, role)
        except SpacectlError as exc:
            raise exc.with_context("failed to send invitation") from exc
    success(f"Invitation sent to {email}")


@invitations_app.command("list")
@exits_on_error
def org_invitations_list(
    ctx: typer.Context,
    org_name: Optional[str] = typer.Option(None, "--org-name", help="Organization name."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization ID."),
) -> None:
    """List invitations sent from an organization."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        api = OrganizationAPI(transport)
        resolved = resolve_organization_id(api, org_name, org_id, _ORG_FLAGS)
        try:
            invitations = api.list_invitations(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to list invitations") from exc
    cli.render(invitations)


@invitations_app.command("mine")
@exits_on_error
def org_invitations_mine(ctx: typer.Context) -> None:
    """List organization invitations addressed to you."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            invitations = OrganizationAPI(transport).list_user_invitations()
    except SpacectlError as exc:
        raise exc.with_context("failed to list invitations") from exc
    cli.render(invitations)


@invitations_app.command("accept")
@exits_on_error
def org_invitations_accept(
    ctx: typer.Context,
    invitation_id: str = typer.Argument(help="Invitation ID."),
) -> None:
    """Accept an organization invitation."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            OrganizationAPI(transport).accept_invitation(invitation_id)
    except SpacectlError as exc:
        raise exc.with_context("failed to accept invitation") from exc
    success("Invitation accepted")


@invitations_app.command("decline")
@exits_on_error
def org_invitations_decline(
    ctx: typer.Context,
    invitation_id: str = typer.Argument(help="Invitation ID."),
) -> None:
    """Decline an organization invitation."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            OrganizationAPI(transport).decline_invitation(invitation_id)
    except SpacectlError as exc:
        raise exc.with_context("failed to decline invitation") from exc
    success("Invitation declined")
