from __future__ import annotations

from types import SimpleNamespace

import pytest

from redgearctl.core.errors import (
    DeviceDiscoveryError,
    DeviceOpenError,
    TransportReadError,
    TransportWriteError,
)
from redgearctl.transports import hid_feature
from redgearctl.transports.hid_feature import HIDFeatureDevice, HIDFeatureTransport


class FakeHandle:
    def __init__(self, *, open_error: Exception | None = None, written: int = 8) -> None:
        self.open_error = open_error
        self.written = written
        self.sent: list[bytes] = []
        self.requests: list[tuple[int, int]] = []
        self.opened: tuple[int, int] | None = None
        self.closed = False

    def open(self, vendor_id: int, product_id: int) -> None:
        if self.open_error:
            raise self.open_error
        self.opened = (vendor_id, product_id)

    def set_nonblocking(self, flag: bool) -> None:
        pass

    def send_feature_report(self, data: bytes) -> int:
        self.sent.append(bytes(data))
        return self.written

    def get_feature_report(self, report_id: int, max_length: int) -> list[int]:
        self.requests.append((report_id, max_length))
        return [report_id] + [0] * (max_length - 1)

    def close(self) -> None:
        self.closed = True


def _fake_hid(handle: FakeHandle, entries: list[dict] | None = None) -> SimpleNamespace:
    return SimpleNamespace(device=lambda: handle, enumerate=lambda: entries or [])


def test_missing_hidapi_raises_clean_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _missing():
        raise ImportError("No module named 'hid'")

    monkeypatch.setattr(hid_feature, "_import_hid", _missing)

    transport = HIDFeatureTransport()
    with pytest.raises(DeviceOpenError):
        transport.open(0x1BCF, 0x08A0)
    with pytest.raises(DeviceDiscoveryError):
        transport.enumerate()


def test_open_failure_raises_device_open_error(monkeypatch: pytest.MonkeyPatch) -> None:
    handle = FakeHandle(open_error=OSError("open failed"))
    monkeypatch.setattr(hid_feature, "_import_hid", lambda: _fake_hid(handle))

    with pytest.raises(DeviceOpenError, match="1bcf:08a0"):
        HIDFeatureTransport().open(0x1BCF, 0x08A0)


def test_open_and_exchange_frame(monkeypatch: pytest.MonkeyPatch) -> None:
    handle = FakeHandle()
    monkeypatch.setattr(hid_feature, "_import_hid", lambda: _fake_hid(handle))

    frame = bytes.fromhex("04070afd03a1fe03")
    with HIDFeatureTransport().open(0x1BCF, 0x08A0, frame_length=8) as device:
        device.send_feature_report(frame)
        readback = device.get_feature_report(frame)

    assert handle.opened == (0x1BCF, 0x08A0)
    assert handle.sent == [frame]
    assert handle.requests == [(0x04, 8)]
    assert readback == bytes([0x04, 0, 0, 0, 0, 0, 0, 0])
    assert handle.closed


def test_negative_write_count_is_write_error() -> None:
    device = HIDFeatureDevice(FakeHandle(written=-1))
    with pytest.raises(TransportWriteError):
        device.send_feature_report(bytes(8))


def test_os_errors_are_wrapped() -> None:
    class BrokenHandle(FakeHandle):
        def send_feature_report(self, data: bytes) -> int:
            raise OSError("write error")

        def get_feature_report(self, report_id: int, max_length: int) -> list[int]:
            raise OSError("read error")

    device = HIDFeatureDevice(BrokenHandle())
    with pytest.raises(TransportWriteError):
        device.send_feature_report(bytes.fromhex("0401000000000000"))
    with pytest.raises(TransportReadError):
        device.get_feature_report(bytes.fromhex("0401000000000000"))


def test_enumerate_dedupes_interfaces(monkeypatch: pytest.MonkeyPatch) -> None:
    entries = [
        {"vendor_id": 0x1BCF, "product_id": 0x08A0, "product_string": "USB Optical Mouse", "path": b"/dev/hidraw1"},
        {"vendor_id": 0x1BCF, "product_id": 0x08A0, "product_string": "USB Optical Mouse", "path": b"/dev/hidraw2"},
        {"vendor_id": 0x046D, "product_id": 0xC52B, "product_string": "", "path": b"/dev/hidraw3"},
    ]
    monkeypatch.setattr(hid_feature, "_import_hid", lambda: _fake_hid(FakeHandle(), entries))

    devices = HIDFeatureTransport().enumerate()
    assert [d.usb_id for d in devices] == ["1bcf:08a0", "046d:c52b"]
    assert devices[0].path == b"/dev/hidraw1"
    assert devices[1].name == "<unknown-device>"
