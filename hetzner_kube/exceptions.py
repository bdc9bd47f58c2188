"""Custom exceptions for hetzner-kube."""


class HetznerKubeError(Exception):
    """Base exception for all hetzner-kube errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class NotFoundError(HetznerKubeError):
    """Exception raised when a named resource does not exist."""

    pass


class ConflictError(HetznerKubeError):
    """Exception raised when the provider rejects a create as a naming conflict."""

    pass


class TransportError(HetznerKubeError):
    """Exception raised when a provider API call fails."""

    pass


class ActionFailedError(HetznerKubeError):
    """Exception raised when the provider reports a failed action."""

    def __init__(self, message: str, details: str = None, code: str | None = None):
        self.code = code
        super().__init__(message, details)


class ActionTimeoutError(HetznerKubeError):
    """Exception raised when an action does not finish before its deadline."""

    pass


class ActionCancelledError(HetznerKubeError):
    """Exception raised when waiting for an action is cancelled."""

    pass


class ValidationError(HetznerKubeError):
    """Exception raised for validation errors."""

    pass


class ConfigurationError(HetznerKubeError):
    """Exception raised for configuration errors."""

    pass
