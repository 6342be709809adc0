"""
Base Service Interface

All services inherit from this base class.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for all services.

    Each service:
    - Has a defined input type
    - Has a defined output type
    - Can validate its inputs
    - Can check its health
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Execute the service's main function.

        Args:
            input_data: Validated input conforming to InputT schema

        Returns:
            Output conforming to OutputT schema

        Raises:
            ServiceError: If execution fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if service is healthy and can process requests."""
        pass

    async def validate_input(self, input_data: InputT) -> InputT:
        """
        Validate input data.
        Default implementation returns input as-is (Pydantic handles validation).
        Override for custom validation logic.
        """
        return input_data


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: Optional[dict] = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class IndicatorError(ServiceError):
    """Base exception for indicator engine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("IndicatorEngine", message, details)


class UnknownIndicatorTypeError(IndicatorError, KeyError):
    """Registry lookup failed; there is no fallback indicator."""

    def __init__(self, indicator_type: str, registered: Optional[list[str]] = None):
        self.indicator_type = indicator_type
        super().__init__(
            f'Indicator type "{indicator_type}" not found in registry',
            {"indicator_type": indicator_type, "registered": registered or []},
        )

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return Exception.__str__(self)


class ParameterValidationError(IndicatorError):
    """Parameters rejected on the strict calculation path."""

    def __init__(self, indicator_type: str, errors: list[str]):
        self.indicator_type = indicator_type
        self.errors = list(errors)
        super().__init__(
            f"Invalid parameters for {indicator_type}: {'; '.join(errors)}",
            {"indicator_type": indicator_type, "errors": self.errors},
        )


class UnknownPresetError(IndicatorError, KeyError):
    """Requested preset bundle does not exist."""

    def __init__(self, preset: str, available: Optional[list[str]] = None):
        self.preset = preset
        super().__init__(
            f'Preset "{preset}" not found',
            {"preset": preset, "available": available or []},
        )

    def __str__(self) -> str:
        return Exception.__str__(self)
