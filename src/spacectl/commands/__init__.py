"""Built-in CLI sub-commands for spacectl.

This package groups the Typer sub-command modules that form the CLI's
command tree:

* :mod:`~spacectl.commands.auth` -- login, logout, registration, ``whoami``.
* :mod:`~spacectl.commands.config` -- view and modify the config file.
* :mod:`~spacectl.commands.organization` -- organizations, members, invitations.
* :mod:`~spacectl.commands.project` -- projects, members, invitations.
* :mod:`~spacectl.commands.tenant` -- tenants and their placement catalogue.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``org``) or plain callback functions registered
directly on the root app (for single commands like ``whoami``).
:mod:`~spacectl.commands.resolver` holds the shared name-or-ID lookups.
"""
