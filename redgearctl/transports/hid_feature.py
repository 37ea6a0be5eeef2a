"""HID feature-report transport implementation using hidapi."""

from __future__ import annotations

from typing import Any

from redgearctl.core.errors import (
    DeviceDiscoveryError,
    DeviceOpenError,
    TransportReadError,
    TransportWriteError,
)
from redgearctl.core.model import DetectedDevice


def _import_hid() -> Any:
    import hid  # type: ignore

    return hid


class HIDFeatureDevice:
    def __init__(self, handle: Any, *, frame_length: int = 8) -> None:
        self._handle = handle
        self._frame_length = frame_length

    def send_feature_report(self, frame: bytes) -> None:
        try:
            written = self._handle.send_feature_report(frame)
        except (OSError, ValueError) as exc:
            raise TransportWriteError(f"SET_REPORT failed: {exc}") from exc
        if written is not None and written < 0:
            raise TransportWriteError(f"SET_REPORT failed: device returned {written}")

    def get_feature_report(self, frame: bytes) -> bytes:
        try:
            data = self._handle.get_feature_report(frame[0], self._frame_length)
        except (OSError, ValueError) as exc:
            raise TransportReadError(f"GET_REPORT failed: {exc}") from exc
        return bytes(data)

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> HIDFeatureDevice:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class HIDFeatureTransport:
    def enumerate(self) -> list[DetectedDevice]:
        try:
            hid = _import_hid()
        except ImportError as exc:
            raise DeviceDiscoveryError(
                "HID transport requires 'hidapi'. Install dependency and retry."
            ) from exc

        try:
            entries = hid.enumerate()
        except OSError as exc:
            raise DeviceDiscoveryError(f"HID enumeration failed: {exc}") from exc

        seen: set[tuple[int, int]] = set()
        devices: list[DetectedDevice] = []
        for entry in entries:
            key = (entry["vendor_id"], entry["product_id"])
            if key in seen:
                continue
            seen.add(key)
            devices.append(
                DetectedDevice(
                    vendor_id=entry["vendor_id"],
                    product_id=entry["product_id"],
                    name=entry.get("product_string") or "<unknown-device>",
                    path=entry.get("path"),
                )
            )
        return devices

    def open(self, vendor_id: int, product_id: int, *, frame_length: int = 8) -> HIDFeatureDevice:
        try:
            hid = _import_hid()
        except ImportError as exc:
            raise DeviceOpenError(
                "HID transport requires 'hidapi'. Install dependency and retry."
            ) from exc

        handle = hid.device()
        try:
            handle.open(vendor_id, product_id)
        except (OSError, ValueError) as exc:
            raise DeviceOpenError(
                f"Could not open HID device {vendor_id:04x}:{product_id:04x}: {exc}. "
                "Check that it is connected and that you have permission (udev rules)."
            ) from exc
        handle.set_nonblocking(False)
        return HIDFeatureDevice(handle, frame_length=frame_length)
