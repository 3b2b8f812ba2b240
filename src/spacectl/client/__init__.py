"""HTTP layer for spacectl.

:class:`Transport` performs authenticated requests with one-shot token
refresh; :func:`handle_response` and :func:`handle_text_response` turn its
raw responses into decoded values or typed errors.

Example::

    from spacectl.client import Transport, handle_response
    from spacectl.models import User

    with Transport(store) as transport:
        user = handle_response(transport.execute("GET", "/api/v1/user/info"), User)
"""

from spacectl.client.response import handle_response, handle_text_response
from spacectl.client.transport import Transport

__all__ = ["Transport", "handle_response", "handle_text_response"]
