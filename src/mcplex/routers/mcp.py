"""Streamable HTTP transport for the MCP endpoint.

This module binds the dispatcher to HTTP:
- POST /mcp carries JSON-RPC messages (handshake, tools/list, tools/call)
- GET /mcp opens the SSE stream for server-initiated messages
- DELETE /mcp terminates the session

The session id travels in the ``mcp-session-id`` header in both directions.
"""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sse_starlette.sse import EventSourceResponse

from mcplex.dependencies import get_dispatcher
from mcplex.errors import InvalidSession, StreamAlreadyAttached
from mcplex.models.jsonrpc import PARSE_ERROR, error_response, no_valid_session_response
from mcplex.sessions import Dispatcher

logger = logging.getLogger(__name__)

MCP_SESSION_ID_HEADER = "mcp-session-id"
INVALID_SESSION_TEXT = "Invalid or missing session ID"

router = APIRouter(tags=["mcp"])


@router.post("/mcp")
async def handle_post(
    request: Request,
    dispatcher: Annotated[Dispatcher, Depends(get_dispatcher)],
    mcp_session_id: Annotated[str | None, Header()] = None,
) -> Response:
    """Handle a JSON-RPC message or batch.

    Without a session header only an initialize request is accepted; it
    creates a session whose id is returned in the ``mcp-session-id`` header.

    Args:
        request: The FastAPI request object
        dispatcher: Injected Dispatcher
        mcp_session_id: Session id header, if any

    Returns:
        200 with the JSON-RPC response, 202 when only notifications or client
        responses were posted, 400 with a JSON-RPC error envelope when the body
        is not JSON or no session can be resolved
    """
    try:
        message = await request.json()
    except ValueError:
        logger.debug("Rejected POST with unparsable body")
        return JSONResponse(
            status_code=400,
            content=error_response(None, PARSE_ERROR, "Parse error"),
        )

    try:
        result = await dispatcher.handle_post(mcp_session_id, message)
    except InvalidSession:
        return JSONResponse(status_code=400, content=no_valid_session_response())

    headers = {MCP_SESSION_ID_HEADER: result.session_id} if result.session_id else {}
    if result.accepted_only:
        return Response(status_code=202, headers=headers)
    return JSONResponse(content=result.response, headers=headers)


@router.get("/mcp")
async def handle_get(
    dispatcher: Annotated[Dispatcher, Depends(get_dispatcher)],
    mcp_session_id: Annotated[str | None, Header()] = None,
) -> Response:
    """Open the SSE stream for server-initiated messages.

    The stream stays open until the session is terminated or the client
    disconnects. Only one stream per session may be open at a time.

    Args:
        dispatcher: Injected Dispatcher
        mcp_session_id: Session id header

    Returns:
        EventSourceResponse, 400 for a missing or unknown session, 409 when a
        stream is already open
    """
    try:
        session = dispatcher.get_session(mcp_session_id)
        stream = session.open_stream()
    except InvalidSession:
        return PlainTextResponse(INVALID_SESSION_TEXT, status_code=400)
    except StreamAlreadyAttached:
        return PlainTextResponse(
            "Conflict: Only one stream is allowed per session", status_code=409
        )

    logger.info(f"Opened stream for session {session.session_id}")

    async def event_generator():
        """Forward queued session messages as SSE events."""
        try:
            async for message in stream:
                yield {"event": "message", "data": json.dumps(message)}
        finally:
            await stream.aclose()
            logger.debug(f"Stream for session {session.session_id} ended")

    return EventSourceResponse(
        event_generator(),
        headers={MCP_SESSION_ID_HEADER: session.session_id},
    )


@router.delete("/mcp")
async def handle_delete(
    dispatcher: Annotated[Dispatcher, Depends(get_dispatcher)],
    mcp_session_id: Annotated[str | None, Header()] = None,
) -> Response:
    """Terminate a session.

    A second DELETE for the same id finds nothing to remove and gets the same
    400 answer as an unknown id.

    Args:
        dispatcher: Injected Dispatcher
        mcp_session_id: Session id header

    Returns:
        200 when the session was terminated, 400 otherwise
    """
    if not mcp_session_id or not dispatcher.terminate(mcp_session_id):
        return PlainTextResponse(INVALID_SESSION_TEXT, status_code=400)
    return Response(status_code=200)
