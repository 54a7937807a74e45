"""Custom exception hierarchy for asana-sync.

Exception Hierarchy:
    AsanaSyncError (base)
    ├── ConfigurationError
    ├── MatchError
    └── CollaboratorError

Only ConfigurationError is allowed to escape an action routine. MatchError is
recovered inside the reference extractor and CollaboratorError is recovered per
task reference by the orchestrator.

Example Usage:
    >>> from asana_sync.exceptions import ConfigurationError
    >>> try:
    ...     inputs.require("asana-pat")
    ... except ConfigurationError as e:
    ...     print(e.message)
"""


class AsanaSyncError(Exception):
    """Base exception for all asana-sync errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(AsanaSyncError):
    """Configuration-related errors.

    Fatal for the run and surfaced as a failed step.

    Examples:
        - Required action input not supplied
        - Unknown action identifier
        - Unreadable event payload or inputs file
    """

    pass


class MatchError(AsanaSyncError):
    """A trigger phrase was followed by something that is not a task link.

    Attributes:
        token: The text consumed after the trigger phrase
    """

    def __init__(self, message: str, token: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            token: The rejected path token
        """
        self.token = token
        super().__init__(message)


class CollaboratorError(AsanaSyncError):
    """A call to Asana or GitHub failed.

    Attributes:
        status_code: HTTP status code (if applicable)
        response_text: Response body text (if applicable)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        # Preserve original message
        self.message = message
