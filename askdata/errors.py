"""Exception hierarchy for the conversation service."""


class AskDataError(Exception):
    """Base exception for all service errors."""


class ProtocolError(AskDataError):
    """A line of the turn stream could not be decoded."""
    def __init__(self, reason: str, line: str = ""):
        self.reason = reason
        self.line = line
        super().__init__(f"Malformed stream line ({reason}): {line[:80]!r}")


class ToolNotFoundError(AskDataError):
    """The agent asked for a tool that is not registered."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool not found: {name}")


class ToolValidationError(AskDataError):
    """Tool arguments do not satisfy the tool's contract."""
    def __init__(self, name: str, message: str):
        self.name = name
        self.message = message
        super().__init__(message)


class ToolStatusRegressionError(AskDataError):
    """A tool call status tried to move backwards."""
    def __init__(self, tool_call_id: str, current: str, requested: str):
        self.tool_call_id = tool_call_id
        super().__init__(
            f"Tool call {tool_call_id} cannot move from {current} to {requested}"
        )


class InvalidRunTransitionError(AskDataError):
    """The run lifecycle received a transition it does not allow."""
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid run transition: {current} -> {requested}")


class WriteOperationError(AskDataError):
    """A query contains a write operation."""
    def __init__(self):
        super().__init__("Write operations are not allowed")


class QueryExtractionError(AskDataError):
    """The model response did not contain a fenced query block."""
    def __init__(self):
        super().__init__("The model response did not contain a query block")


class UnsupportedEngineError(AskDataError):
    """The query runner cannot execute queries for this engine."""
    def __init__(self, engine: str):
        self.engine = engine
        super().__init__(f"Unsupported data source engine: {engine}")


class ConversationNotFoundError(AskDataError):
    """The conversation does not exist for this owner and workspace."""
    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}")
