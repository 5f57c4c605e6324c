"""Stand-ins for requests objects used across the test-suite."""

import json
from unittest.mock import Mock


def make_response(status, body=None):
    """Build a stand-in for ``requests.Response``."""
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode("utf-8")
    else:
        content = json.dumps(body).encode("utf-8")
    return Mock(status_code=status, content=content)


def make_session(*outcomes):
    """A session whose ``post`` returns (or raises) ``outcomes`` in order."""
    session = Mock()
    session.post.side_effect = list(outcomes)
    return session
