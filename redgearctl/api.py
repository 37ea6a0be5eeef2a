"""Stable public API for building tooling on top of redgearctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from redgearctl.core.errors import (
    ConfigurationError,
    DeviceDiscoveryError,
    DeviceOpenError,
    DeviceSelectionError,
    PatchError,
    ProfileLoadError,
    ProfileValidationError,
    RedgearctlError,
    TransportError,
    TransportReadError,
    TransportWriteError,
)
from redgearctl.core.model import (
    ApplyResult,
    BreathingSpeed,
    Configuration,
    ContinuousFire,
    DetectedDevice,
    DeviceProfile,
    DpiLevel,
    FrameOutcome,
    FrameSequence,
    LedBrightness,
    LedMode,
    LedStatus,
    Patch,
    ResolvedTarget,
    Setting,
    TransmitReport,
    WriteErrorPolicy,
)
from redgearctl.core.patch import apply_patches, substitute
from redgearctl.core.service import MouseService
from redgearctl.transports.base import Transport

__all__ = [
    "RedgearctlError",
    "ConfigurationError",
    "DeviceDiscoveryError",
    "DeviceOpenError",
    "DeviceSelectionError",
    "PatchError",
    "ProfileLoadError",
    "ProfileValidationError",
    "TransportError",
    "TransportReadError",
    "TransportWriteError",
    "ApplyResult",
    "BreathingSpeed",
    "Configuration",
    "ContinuousFire",
    "DetectedDevice",
    "DeviceProfile",
    "DpiLevel",
    "FrameOutcome",
    "FrameSequence",
    "LedBrightness",
    "LedMode",
    "LedStatus",
    "Patch",
    "ResolvedTarget",
    "Setting",
    "TransmitReport",
    "WriteErrorPolicy",
    "apply_patches",
    "substitute",
    "Client",
]


class Client:
    """Public client for interacting with redgearctl core capabilities.

    A `Client` instance wraps profile loading, HID device discovery/matching,
    frame synthesis, and feature-report transmission behind a stable API
    intended for third-party tools (GUI/TUI/services/scripts).
    """

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._service = MouseService(transport=transport, sleep=sleep)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_profiles(self) -> list[DeviceProfile]:
        return self._service.list_profiles()

    def list_devices(self) -> list[DetectedDevice]:
        return self._service.list_devices()

    def resolve_target(
        self,
        *,
        profile_id: str | None = None,
        device_hint: str | None = None,
    ) -> ResolvedTarget:
        return self._service.resolve_target(profile_id=profile_id, device_hint=device_hint)

    def build_frames(
        self,
        config: Configuration,
        *,
        profile_id: str | None = None,
    ) -> FrameSequence:
        """Return the frame sequence ``config`` would send, without touching hardware."""
        _, frames = self._service.plan(config, profile_id=profile_id)
        return frames

    def apply(
        self,
        config: Configuration,
        *,
        profile_id: str | None = None,
        device_hint: str | None = None,
        on_write_error: WriteErrorPolicy | None = None,
    ) -> ApplyResult:
        return self._service.apply(
            config,
            profile_id=profile_id,
            device_hint=device_hint,
            on_write_error=on_write_error,
        )
