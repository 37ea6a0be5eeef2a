"""Service layer used by CLI and API frontends."""

from __future__ import annotations

import time
from collections.abc import Callable

from redgearctl.core.compose import build_frames
from redgearctl.core.device_match import best_profile_for_device
from redgearctl.core.errors import ConfigurationError, DeviceSelectionError
from redgearctl.core.model import (
    ApplyResult,
    Configuration,
    DetectedDevice,
    DeviceProfile,
    FrameSequence,
    ResolvedTarget,
    WriteErrorPolicy,
)
from redgearctl.core.profile_loader import load_profiles
from redgearctl.core.transmit import transmit
from redgearctl.transports.base import Transport
from redgearctl.transports.hid_feature import HIDFeatureTransport


class MouseService:
    def __init__(
        self,
        *,
        transport: Transport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        loaded = load_profiles()
        self.profiles = loaded.profiles
        self.load_warnings = loaded.warnings
        self.transport = transport or HIDFeatureTransport()
        self._sleep = sleep

    def list_profiles(self) -> list[DeviceProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.id)

    def list_devices(self) -> list[DetectedDevice]:
        return self.transport.enumerate()

    def resolve_profile(self, profile_id: str | None = None) -> DeviceProfile:
        if profile_id:
            profile = self.profiles.get(profile_id)
            if profile is None:
                raise DeviceSelectionError(
                    f"Unknown profile '{profile_id}'. Use 'redgearctl profiles' to inspect available profiles."
                )
            return profile
        if len(self.profiles) == 1:
            return next(iter(self.profiles.values()))
        available = ", ".join(sorted(self.profiles))
        raise DeviceSelectionError(f"Multiple profiles loaded ({available}). Use --profile to choose one.")

    def resolve_target(
        self,
        profile_id: str | None,
        device_hint: str | None,
    ) -> ResolvedTarget:
        devices = self.list_devices()

        if not devices:
            raise DeviceSelectionError("No HID devices found. Ensure the mouse is connected.")

        candidates: list[ResolvedTarget] = []
        profile_override: DeviceProfile | None = None
        if profile_id:
            profile_override = self.resolve_profile(profile_id)

        for device in devices:
            if profile_override:
                profile = profile_override
                if best_profile_for_device(device, {profile.id: profile}) is None:
                    continue
            else:
                profile = best_profile_for_device(device, self.profiles)
                if profile is None:
                    continue
            candidates.append(ResolvedTarget(device=device, profile=profile))

        if device_hint:
            hint = device_hint.lower()
            hinted = [
                c
                for c in candidates
                if c.device.usb_id == hint
                or hint in c.device.name.lower()
                or hint in c.profile.id.lower()
                or hint in c.profile.name.lower()
            ]
            if not hinted:
                raise DeviceSelectionError(f"No device found matching '{device_hint}'")
            candidates = hinted

        if not candidates:
            if profile_id:
                raise DeviceSelectionError(f"No connected device matched profile '{profile_id}'.")
            raise DeviceSelectionError(
                "No connected device matched any profile. Use --profile to target explicitly or add a profile."
            )

        if len(candidates) > 1:
            candidate_desc = ", ".join(f"{c.device.usb_id} ({c.device.name})" for c in candidates)
            raise DeviceSelectionError(
                f"Multiple candidate devices found: {candidate_desc}. Use --device to choose one."
            )

        return candidates[0]

    def plan(self, config: Configuration, profile_id: str | None = None) -> tuple[DeviceProfile, FrameSequence]:
        profile = self.resolve_profile(profile_id)
        return profile, build_frames(profile, config)

    def apply(
        self,
        config: Configuration,
        profile_id: str | None = None,
        device_hint: str | None = None,
        on_write_error: WriteErrorPolicy | None = None,
    ) -> ApplyResult:
        if config.is_empty:
            raise ConfigurationError("No settings requested. Use --help to list the available options.")

        target = self.resolve_target(profile_id=profile_id, device_hint=device_hint)
        spec = target.profile.transport
        frames = build_frames(target.profile, config)

        device = self.transport.open(
            target.device.vendor_id,
            target.device.product_id,
            frame_length=spec.frame_length,
        )
        try:
            report = transmit(
                frames,
                device,
                settle_s=spec.settle_ms / 1000,
                on_write_error=on_write_error or spec.on_write_error,
                sleep=self._sleep,
            )
        finally:
            device.close()

        return ApplyResult(target=target, frames=frames, report=report)
