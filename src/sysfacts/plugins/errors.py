"""Plugin error types and error codes.

This module defines the error hierarchy for the fact collection engine,
providing specific error codes for different failure scenarios.

Classes:
    - FactsErrorCode: Enum of error codes for categorizing errors
    - PluginError: Base exception for all plugin-related errors
    - NoAttributeError: A declared dependency has no registered provider
    - DependencyCycleError: A plugin was re-entered while still resolving
"""

from enum import Enum


class FactsErrorCode(str, Enum):
    """Error codes for plugin operations.

    Used to categorize errors for logging, exit codes, and error handling
    strategies.
    """

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"

    # Loading errors
    LOAD_FAILED = "LOAD_FAILED"
    PLUGIN_NOT_FOUND = "PLUGIN_NOT_FOUND"

    # Dependency graph errors
    NO_ATTRIBUTE = "NO_ATTRIBUTE"
    DEPENDENCY_CYCLE = "DEPENDENCY_CYCLE"


class PluginError(Exception):
    """Base exception for plugin errors.

    Attributes:
        code: The error code categorizing this error.
        message: Human-readable error message.
        plugin_name: Name of the plugin that caused the error (if applicable).
        cause: The underlying exception that caused this error (if any).

    Example:
        raise PluginError(
            code=FactsErrorCode.LOAD_FAILED,
            message="Plugin file does not define a Plugin class",
            plugin_name="linux::cpu",
        )
    """

    def __init__(
        self,
        code: FactsErrorCode,
        message: str,
        plugin_name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the plugin error.

        Args:
            code: The error code for this error.
            message: Human-readable error message.
            plugin_name: Name of the plugin (optional).
            cause: The underlying exception (optional).
        """
        self.code = code
        self.message = message
        self.plugin_name = plugin_name
        self.cause = cause

        full_message = f"[{code.value}] {message}"
        if plugin_name:
            full_message = f"[{plugin_name}] {full_message}"

        super().__init__(full_message)


class NoAttributeError(PluginError):
    """Raised when a dependency path has no registered provider.

    Attributes:
        attribute: The dependency path that could not be resolved.
    """

    def __init__(self, attribute: str, plugin_name: str | None = None) -> None:
        self.attribute = attribute
        super().__init__(
            code=FactsErrorCode.NO_ATTRIBUTE,
            message=f"Cannot find plugin providing attribute '{attribute}'",
            plugin_name=plugin_name,
        )


class DependencyCycleError(PluginError):
    """Raised when a plugin is re-entered before its dependencies resolved."""

    def __init__(self, plugin_name: str) -> None:
        super().__init__(
            code=FactsErrorCode.DEPENDENCY_CYCLE,
            message=(
                "Dependency cycle detected. This must be resolved before "
                "the run can continue."
            ),
            plugin_name=plugin_name,
        )
