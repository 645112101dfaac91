"""Custom exceptions for the Gasless SDK."""

from typing import Optional, Any, Dict


class GaslessSDKError(Exception):
    """Base exception for all Gasless SDK errors."""

    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidRequestError(GaslessSDKError):
    """Transfer request is malformed. Raised before any I/O."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class ConfigurationMissingError(GaslessSDKError):
    """A required setting is absent. Fatal and never retryable."""

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.setting = setting


class PreconditionFailedError(GaslessSDKError):
    """A ledger read failed or returned data the SDK cannot use."""
    pass


class InsufficientBalanceError(PreconditionFailedError):
    """Sender balance does not cover amount plus fee."""

    def __init__(
        self,
        required: int,
        available: int,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message or f"Insufficient balance: required {required}, available {available}",
            details
        )
        self.required = required
        self.available = available


class AuthorizationUnavailableError(GaslessSDKError):
    """Signer refused or could not be reached for the delegation authorization."""
    pass


class SimulationFailedError(GaslessSDKError):
    """Relayer simulation shows the batch would revert."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.code = code


class SponsorRejectedError(GaslessSDKError):
    """Relayer declined to sponsor the batch."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.code = code
        self.status_code = status_code


class NetworkTimeoutError(GaslessSDKError):
    """Transport failure or timeout talking to an external service.

    When ``submitted`` is true the batch may already be pending and the
    outcome is unknown; query the submission status instead of retrying.
    """

    def __init__(
        self,
        message: str,
        timeout_duration: Optional[float] = None,
        submitted: bool = False,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.timeout_duration = timeout_duration
        self.submitted = submitted

    @property
    def retryable(self) -> bool:
        return not self.submitted
