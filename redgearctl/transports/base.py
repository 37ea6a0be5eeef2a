"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from redgearctl.core.model import DetectedDevice


class FeatureReportDevice(Protocol):
    def send_feature_report(self, frame: bytes) -> None:
        """Write one frame as a feature report; raise TransportWriteError on failure."""

    def get_feature_report(self, frame: bytes) -> bytes:
        """Read back the feature report matching ``frame``; raise TransportReadError on failure."""

    def close(self) -> None:
        """Release the device handle."""


class Transport(Protocol):
    def enumerate(self) -> list[DetectedDevice]:
        """List attached HID devices, one entry per vendor/product pair."""

    def open(self, vendor_id: int, product_id: int, *, frame_length: int = 8) -> FeatureReportDevice:
        """Open a device; raise DeviceOpenError on failure."""
