"""Domain-specific errors for redgearctl."""


class RedgearctlError(Exception):
    """Base error for redgearctl."""


class ProfileValidationError(RedgearctlError):
    """Raised when a device profile does not conform to schema or semantics."""


class ProfileLoadError(RedgearctlError):
    """Raised when loading profile sources fails."""


class ConfigurationError(RedgearctlError):
    """Raised when requested settings are out of range or conflict."""


class PatchError(RedgearctlError):
    """Raised when a patch does not fit the frame it targets."""


class DeviceDiscoveryError(RedgearctlError):
    """Raised when HID enumeration fails."""


class DeviceSelectionError(RedgearctlError):
    """Raised when device matching cannot resolve a single target."""


class DeviceOpenError(RedgearctlError):
    """Raised when the HID device cannot be opened."""


class TransportError(RedgearctlError):
    """Base transport error."""


class TransportWriteError(TransportError):
    """Raised when a feature report write fails."""


class TransportReadError(TransportError):
    """Raised when a feature report read-back fails."""
