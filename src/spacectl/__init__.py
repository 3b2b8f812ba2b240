"""spacectl -- command-line client for the Kubespaces management API.

Manages organizations, projects and tenants (virtual Kubernetes clusters)
from the terminal. Sessions are kept in ``~/.spacectl`` and refreshed
transparently when the access token expires.

Typical workflow::

    spacectl auth login --github
    spacectl org list
    spacectl tenant create dev --project-name web --k8s-version 1.30
    spacectl tenant kubeconfig <id> --output-file dev.yaml

Modules:
    app: Typer application and CLI entry point.
    config: Credential store backed by the ``~/.spacectl`` file.
    client: Authenticated HTTP transport and response decoding.
    api: Typed resource clients.
    formatter: table / JSON / YAML / CSV rendering.
    output: stderr diagnostics.
    exceptions: Exception hierarchy with exit-code mapping.
"""

__version__ = "0.3.0"
