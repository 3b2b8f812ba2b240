"""Interactive login flows.

Classes:
    :class:`CallbackServer` -- local listener receiving tokens from the
        backend's GitHub landing page.
    :class:`PendingLogin` -- single-slot, settle-once login result.

Functions:
    :func:`github_login` -- full browser login: serve, open, wait, save.
"""

from spacectl.auth.callback import CallbackServer, LoginTokens, PendingLogin, github_login

__all__ = ["CallbackServer", "LoginTokens", "PendingLogin", "github_login"]
