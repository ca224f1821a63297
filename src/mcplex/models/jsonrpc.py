"""JSON-RPC 2.0 envelopes and error codes."""

from typing import Any

from pydantic import BaseModel

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
# Implementation-defined server error, used when no session can be resolved
SESSION_ERROR = -32000

NO_VALID_SESSION_MESSAGE = "Bad Request: No valid session ID provided"


class JSONRPCError(BaseModel):
    """The error member of a JSON-RPC error response."""

    code: int
    message: str
    data: Any | None = None


class JSONRPCErrorResponse(BaseModel):
    """A JSON-RPC error response."""

    jsonrpc: str = "2.0"
    error: JSONRPCError
    id: str | int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize, keeping ``id: null`` but dropping empty error data."""
        return {
            "jsonrpc": self.jsonrpc,
            "error": self.error.model_dump(exclude_none=True),
            "id": self.id,
        }


def success_response(request_id: str | int, result: dict[str, Any]) -> dict[str, Any]:
    """Build a JSON-RPC success response."""
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def error_response(
    request_id: str | int | None,
    code: int,
    message: str,
    data: Any | None = None,
) -> dict[str, Any]:
    """Build a JSON-RPC error response."""
    return JSONRPCErrorResponse(
        error=JSONRPCError(code=code, message=message, data=data),
        id=request_id,
    ).to_dict()


def no_valid_session_response() -> dict[str, Any]:
    """The fixed envelope returned when no session can be resolved."""
    return error_response(None, SESSION_ERROR, NO_VALID_SESSION_MESSAGE)
