"""Exception types for mcplex-server.

Only session-resolution and registration failures are meant to escape to the
transport or abort startup. The tool-level errors are raised inside the tool
execution path and converted into failure content blocks there.
"""


class McplexError(Exception):
    """Base class for all mcplex errors."""


class InvalidSession(McplexError):
    """No session id was given, or the id is not in the session table."""

    def __init__(self, session_id: str | None = None):
        self.session_id = session_id
        if session_id:
            message = f"Session {session_id} not found"
        else:
            message = "No valid session ID provided"
        super().__init__(message)


class DuplicateToolName(McplexError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate tool: {name}")


class UnknownTool(McplexError):
    """The requested tool name is not in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ValidationError(McplexError):
    """Tool arguments do not match the tool's input schema."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class ToolExecutionError(McplexError):
    """A tool handler raised or its external call failed.

    Tool bodies can also raise this directly to report a failure with a
    message meant for the model.
    """


class StreamAlreadyAttached(McplexError):
    """A server-initiated message stream is already open for the session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} already has an open stream")
