"""Tenant commands -- virtual Kubernetes clusters and their placement.

Provides the ``spacectl tenant`` sub-command group. Tenants live inside a
project, chosen with ``--project`` (ID) or ``--project-name``; when neither
is given the first project you are a member of is used.

Example::

    spacectl tenant create dev --project-name web --cloud eks --region eu
    spacectl tenant status --name dev
    spacectl tenant kubeconfig t-123 --output-file ~/.kube/dev.yaml
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from spacectl.api import ProjectAPI, TenantAPI
from spacectl.client import Transport
from spacectl.commands.resolver import optional_project_id, resolve_tenant_id
from spacectl.config import atomic_write
from spacectl.context import confirm_or_abort, exits_on_error, get_context
from spacectl.exceptions import ConfigurationError, SpacectlError
from spacectl.exit_codes import EXIT_NOT_FOUND
from spacectl.models import CreateTenantRequest, UpdateTenantRequest
from spacectl.output import print_data, success, warning


tenant_app = typer.Typer(no_args_is_help=True)

_PROJECT_OPTION = typer.Option(None, "--project", help="Project ID.")
_PROJECT_NAME_OPTION = typer.Option(None, "--project-name", help="Project name.")


def _project_or_first(
    projects: ProjectAPI,
    project_id: Optional[str],
    project_name: Optional[str],
) -> str:
    resolved = optional_project_id(projects, project_id, project_name)
    if resolved:
        return resolved
    try:
        memberships = projects.list_user_projects()
    except SpacectlError as exc:
        raise exc.with_context("failed to list projects") from exc
    if not memberships:
        raise SpacectlError("no projects found. Create a project first", EXIT_NOT_FOUND)
    return memberships[0].project.id


def _default_kubernetes_version(tenants: TenantAPI) -> str:
    versions = tenants.list_kubernetes_versions()
    for version in versions:
        if version.is_default:
            return version.version
    if versions:
        return versions[0].version
    raise ConfigurationError("no Kubernetes versions available; pass --k8s-version")


@tenant_app.command("list")
@exits_on_error
def tenant_list(
    ctx: typer.Context,
    project_id: Optional[str] = _PROJECT_OPTION,
    project_name: Optional[str] = _PROJECT_NAME_OPTION,
    all_projects: bool = typer.Option(False, "--all", help="List tenants of every project."),
) -> None:
    """List tenants of a project, or of every project with ``--all``."""
    cli = get_context(ctx)
    cli.require_auth()
    if all_projects and (project_id or project_name):
        raise ConfigurationError("--all cannot be combined with --project or --project-name")

    with cli.transport() as transport:
        projects = ProjectAPI(transport)
        tenants = TenantAPI(transport)

        if not all_projects:
            resolved = _project_or_first(projects, project_id, project_name)
            try:
                result = tenants.list_project_tenants(resolved)
            except SpacectlError as exc:
                raise exc.with_context("failed to list tenants") from exc
            cli.render(result)
            return

        try:
            memberships = projects.list_user_projects()
        except SpacectlError as exc:
            raise exc.with_context("failed to list projects") from exc
        rows: list[dict[str, Any]] = []
        for membership in memberships:
            project = membership.project
            try:
                project_tenants = tenants.list_project_tenants(project.id)
            except SpacectlError as exc:
                warning(f"Skipping project {project.name}: {exc}")
                continue
            for tenant in project_tenants:
                rows.append(
                    {
                        "project": project.name,
                        "name": tenant.namespace or tenant.name,
                        "cloud_provider": tenant.cloud_provider,
                        "region": tenant.region,
                        "kubernetes_version": tenant.kubernetes_version,
                        "compute_quota": tenant.compute_quota,
                        "memory_quota_gb": tenant.memory_quota_gb,
                        "status": tenant.status,
                    }
                )
    cli.render(rows)


@tenant_app.command("create")
@exits_on_error
def tenant_create(
    ctx: typer.Context,
    name: str = typer.Argument(help="Tenant name."),
    project_id: Optional[str] = _PROJECT_OPTION,
    project_name: Optional[str] = _PROJECT_NAME_OPTION,
    cloud: Optional[str] = typer.Option(None, "--cloud", help="Cloud provider (default from config)."),
    region: Optional[str] = typer.Option(None, "--region", help="Region (default from config)."),
    k8s_version: Optional[str] = typer.Option(
        None, "--k8s-version", help="Kubernetes version (default: the server's default)."
    ),
    compute: Optional[int] = typer.Option(None, "--compute", help="Compute cores (default from config)."),
    memory: Optional[int] = typer.Option(None, "--memory", help="Memory in GB (default from config)."),
    namespace_suffix: Optional[str] = typer.Option(
        None, "--namespace-suffix", help="Suffix for the generated namespace."
    ),
) -> None:
    """Create a tenant.

    Omitted placement and quota options fall back to the ``default_*``
    values of the config file (see ``spacectl config set``).
    """
    cli = get_context(ctx)
    cli.require_auth()
    config = cli.store.config
    with cli.transport() as transport:
        tenants = TenantAPI(transport)
        resolved = _project_or_first(ProjectAPI(transport), project_id, project_name)
        try:
            request = CreateTenantRequest(
                name=name,
                cloud_provider=cloud or config.default_cloud,
                region=region or config.default_region,
                kubernetes_version=k8s_version or _default_kubernetes_version(tenants),
                compute_quota=compute if compute is not None else config.default_compute,
                memory_quota_gb=memory if memory is not None else config.default_memory,
                namespace_suffix=namespace_suffix,
            )
            tenant = tenants.create(resolved, request)
        except SpacectlError as exc:
            raise exc.with_context("failed to create tenant") from exc
    success(f"Tenant {tenant.name} created")
    cli.render(tenant)


@tenant_app.command("get")
@exits_on_error
def tenant_get(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Tenant name."),
    tenant_id: Optional[str] = typer.Option(None, "--id", help="Tenant ID."),
    project_id: Optional[str] = _PROJECT_OPTION,
    project_name: Optional[str] = _PROJECT_NAME_OPTION,
) -> None:
    """Show one tenant."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        tenants = TenantAPI(transport)
        resolved = _resolve_tenant(transport, tenants, name, tenant_id, project_id, project_name)
        try:
            tenant = tenants.get(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to get tenant") from exc
    cli.render(tenant)


@tenant_app.command("update")
@exits_on_error
def tenant_update(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Tenant name."),
    tenant_id: Optional[str] = typer.Option(None, "--id", help="Tenant ID."),
    project_id: Optional[str] = _PROJECT_OPTION,
    project_name: Optional[str] = _PROJECT_NAME_OPTION,
    k8s_version: Optional[str] = typer.Option(None, "--k8s-version", help="New Kubernetes version."),
    compute: Optional[int] = typer.Option(None, "--compute", help="New compute cores."),
    memory: Optional[int] = typer.Option(None, "--memory", help="New memory in GB."),
) -> None:
    """Change a tenant's Kubernetes version or quotas."""
    request = UpdateTenantRequest(
        kubernetes_version=k8s_version, compute_quota=compute, memory_quota_gb=memory
    )
    cli = get_context(ctx)
    cli.require_auth()
    if not request.model_dump(exclude_none=True):
        raise ConfigurationError("nothing to update: pass --k8s-version, --compute or --memory")
    with cli.transport() as transport:
        tenants = TenantAPI(transport)
        resolved = _resolve_tenant(transport, tenants, name, tenant_id, project_id, project_name)
        try:
            tenant = tenants.update(resolved, request)
        except SpacectlError as exc:
            raise exc.with_context("failed to update tenant") from exc
    success(f"Tenant {tenant.name} updated")
    cli.render(tenant)


@tenant_app.command("delete")
@exits_on_error
def tenant_delete(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Tenant name."),
    tenant_id: Optional[str] = typer.Option(None, "--id", help="Tenant ID."),
    project_id: Optional[str] = _PROJECT_OPTION,
    project_name: Optional[str] = _PROJECT_NAME_OPTION,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Delete a tenant."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        tenants = TenantAPI(transport)
        resolved = _resolve_tenant(transport, tenants, name, tenant_id, project_id, project_name)
        confirm_or_abort(f"Delete tenant {name or resolved}?", force)
        try:
            tenants.delete(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to delete tenant") from exc
    success(f"Tenant {name or resolved} deleted")


@tenant_app.command("status")
@exits_on_error
def tenant_status(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Tenant name."),
    tenant_id: Optional[str] = typer.Option(None, "--id", help="Tenant ID."),
    project_id: Optional[str] = _PROJECT_OPTION,
    project_name: Optional[str] = _PROJECT_NAME_OPTION,
) -> None:
    """Show a tenant's provisioning status."""
    cli = get_context(ctx)
    cli.require_auth()
    with cli.transport() as transport:
        tenants = TenantAPI(transport)
        resolved = _resolve_tenant(transport, tenants, name, tenant_id, project_id, project_name)
        try:
            status = tenants.get_status(resolved)
        except SpacectlError as exc:
            raise exc.with_context("failed to get tenant status") from exc
    cli.render(status)


@tenant_app.command("kubeconfig")
@exits_on_error
def tenant_kubeconfig(
    ctx: typer.Context,
    tenant_id: str = typer.Argument(help="Tenant ID."),
    output_file: Optional[Path] = typer.Option(
        None, "--output-file", help="Write to this file (mode 0600) instead of stdout."
    ),
) -> None:
    """Print or save a tenant's kubeconfig.

    Example::

        spacectl tenant kubeconfig t-123 > dev.yaml
        spacectl tenant kubeconfig t-123 --output-file ~/.kube/dev.yaml
    """
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            kubeconfig = TenantAPI(transport).get_kubeconfig(tenant_id)
    except SpacectlError as exc:
        raise exc.with_context("failed to get kubeconfig") from exc

    if output_file is None:
        print_data(kubeconfig)
        return
    path = output_file.expanduser()
    try:
        atomic_write(path, kubeconfig)
    except OSError as exc:
        raise ConfigurationError(f"failed to write kubeconfig to {path}: {exc}") from exc
    success(f"Kubeconfig written to {path}")


# ------------------------------------------------------------------ #
# Placement catalogue
# ------------------------------------------------------------------ #


@tenant_app.command("locations")
@exits_on_error
def tenant_locations(ctx: typer.Context) -> None:
    """List every cloud/region/zone a tenant can be placed in."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            locations = TenantAPI(transport).list_locations()
    except SpacectlError as exc:
        raise exc.with_context("failed to list locations") from exc
    cli.render(locations)


@tenant_app.command("clouds")
@exits_on_error
def tenant_clouds(ctx: typer.Context) -> None:
    """List the available cloud providers."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            clouds = TenantAPI(transport).list_clouds()
    except SpacectlError as exc:
        raise exc.with_context("failed to list clouds") from exc
    cli.render([{"cloud_provider": cloud} for cloud in clouds])


@tenant_app.command("regions")
@exits_on_error
def tenant_regions(
    ctx: typer.Context,
    cloud: str = typer.Option(..., "--cloud", help="Cloud provider."),
) -> None:
    """List the regions of a cloud provider."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            regions = TenantAPI(transport).list_regions(cloud)
    except SpacectlError as exc:
        raise exc.with_context("failed to list regions") from exc
    cli.render([{"region": region} for region in regions])


@tenant_app.command("zones")
@exits_on_error
def tenant_zones(
    ctx: typer.Context,
    cloud: str = typer.Option(..., "--cloud", help="Cloud provider."),
    region: str = typer.Option(..., "--region", help="Region."),
) -> None:
    """List the zones of a region."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            zones = TenantAPI(transport).list_zones(cloud, region)
    except SpacectlError as exc:
        raise exc.with_context("failed to list zones") from exc
    cli.render([{"zone": zone} for zone in zones])


@tenant_app.command("k8s-versions")
@exits_on_error
def tenant_k8s_versions(ctx: typer.Context) -> None:
    """List the supported Kubernetes versions."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            versions = TenantAPI(transport).list_kubernetes_versions()
    except SpacectlError as exc:
        raise exc.with_context("failed to list Kubernetes versions") from exc
    cli.render(versions)


def _resolve_tenant(
    transport: Transport,
    tenants: TenantAPI,
    name: Optional[str],
    tenant_id: Optional[str],
    project_id: Optional[str],
    project_name: Optional[str],
) -> str:
    if not name or tenant_id:
        return resolve_tenant_id(tenants, name, tenant_id, None)
    project = _project_or_first(ProjectAPI(transport), project_id, project_name)
    return resolve_tenant_id(tenants, name, None, project)
