"""Exceptions raised while starting a hand control session."""

from enum import Enum


class GestureControlError(Exception):
    """Base class for hand control errors."""


class AcquisitionError(GestureControlError):
    """The video source could not be acquired."""


class DeviceReason(str, Enum):
    """Why a capture device could not be opened."""
    PERMISSION_DENIED = "permission-denied"
    NOT_AVAILABLE = "not-available"
    INSECURE_CONTEXT = "insecure-context"


class DeviceError(AcquisitionError):
    """Camera acquisition failure with a machine-readable reason."""

    def __init__(self, reason: DeviceReason, detail: str = ""):
        self.reason = DeviceReason(reason)
        self.detail = detail
        message = self.reason.value
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DetectorUnavailable(GestureControlError):
    """The landmark detection backend could not be loaded."""
