"""Write a ``Response`` to an ASGI ``send`` channel."""

from supaedge._internal.asgi import Send
from supaedge.http.response import Response

# Statuses that never carry a message body (RFC 9110 §6.4.1).
_NO_BODY = frozenset({204, 304})


def body_allowed(status: int) -> bool:
    return status >= 200 and status not in _NO_BODY


def encode_headers(response: Response) -> list[tuple[bytes, bytes]]:
    """Lower-cased latin-1 header pairs, with ``content-length`` filled in
    when the response has a body and did not set one.
    """
    raw = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    ]
    if body_allowed(response.status) and response.header("content-length") is None:
        raw.append((b"content-length", b"%d" % len(response.body)))
    return raw


async def send_response(response: Response, send: Send) -> None:
    """Send the start and body messages for *response*."""
    body = response.body if body_allowed(response.status) else b""
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response),
        }
    )
    await send({"type": "http.response.body", "body": body, "more_body": False})
