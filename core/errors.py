"""
Error types shared by the Yo assistant pipeline.

Every per-cycle error is recovered by the conversation state machine, so
these exist mostly to let callers and logs tell the failure stages apart.
"""


class AssistantError(Exception):
    """Base class for all assistant errors."""


class DeviceUnavailableError(AssistantError):
    """No usable audio capture device was found."""


class StreamError(AssistantError):
    """Hardware or driver level fault while a capture stream was running."""


class CollaboratorError(AssistantError):
    """Speech-to-text, reasoning or speech-output backend failed or returned garbage."""


class ConfigurationError(AssistantError, ValueError):
    """Invalid detector or pipeline configuration, raised at construction time."""
