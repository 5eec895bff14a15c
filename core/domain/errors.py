"""
Domain Errors Module

Exception taxonomy for the Dialog Flow Orchestrator.

Configuration errors (``FlowConfigurationError`` and subclasses) signal programmer
mistakes: they are raised at registration time or on first occurrence and are never
retried. Infrastructure errors (``InfrastructureError`` and subclasses) are transient
failures of an external collaborator; they propagate unmodified to the caller of a
turn, which may retry the whole turn.

An unrecognized intent or an unconfigured classifier is not an error.
"""


class DialogOrchestratorError(Exception):
    """Base class for every error raised by the orchestrator."""


class FlowConfigurationError(DialogOrchestratorError):
    """A flow was registered or referenced incorrectly."""


class DuplicateFlowError(FlowConfigurationError):
    """Raised when a flow id is registered twice."""

    def __init__(self, flow_id: str):
        super().__init__(f"Flow '{flow_id}' is already registered")
        self.flow_id = flow_id


class UnknownFlowError(FlowConfigurationError):
    """Raised when a conversation references a flow id that was never registered."""

    def __init__(self, flow_id: str):
        super().__init__(f"Flow '{flow_id}' is not registered")
        self.flow_id = flow_id


class InvalidFlowError(FlowConfigurationError):
    """Raised when a flow definition has no id or no steps."""


class StepIndexOutOfRangeError(FlowConfigurationError):
    """Raised when the persisted step index does not address a step of the flow."""

    def __init__(self, flow_id: str, index: int, length: int):
        super().__init__(
            f"Step index {index} is out of range for flow '{flow_id}' "
            f"with {length} step(s)"
        )
        self.flow_id = flow_id
        self.index = index
        self.length = length


class StepLimitExceededError(FlowConfigurationError):
    """Raised when chained steps never suspend within the per-turn step limit."""

    def __init__(self, conversation_id: str, limit: int):
        super().__init__(
            f"Conversation '{conversation_id}' executed more than {limit} steps "
            "without waiting for input"
        )
        self.conversation_id = conversation_id
        self.limit = limit


class InfrastructureError(DialogOrchestratorError):
    """An external collaborator failed; the turn may be retried."""


class StoreError(InfrastructureError):
    """The conversation state store could not load or save a state."""


class ChannelError(InfrastructureError):
    """The output channel could not deliver a message."""


class ClassifierError(InfrastructureError):
    """The intent classifier could not be reached or returned an invalid response."""
