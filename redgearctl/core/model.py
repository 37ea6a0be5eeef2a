"""Core data models used across loader, codec, engine, transport, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Union

from redgearctl.core.errors import ConfigurationError

Frame = bytes
FrameSequence = tuple[bytes, ...]


class Setting(str, Enum):
    REPEAT = "repeat"
    FIRING_INTERVAL = "firing_interval"
    LED_BRIGHTNESS = "led_brightness"
    CONTINUOUS_FIRE = "continuous_fire"
    BREATHING_SPEED = "breathing_speed"
    DPI = "dpi"
    LED_MODE = "led_mode"
    LED_STATUS = "led_status"


class DpiLevel(str, Enum):
    DPI1 = "dpi1"
    DPI2 = "dpi2"
    DPI3 = "dpi3"
    DPI4 = "dpi4"
    DPI5 = "dpi5"
    DPI6 = "dpi6"
    DPI7 = "dpi7"
    DPI8 = "dpi8"


DPI_VALUES = {
    DpiLevel.DPI1: 1000,
    DpiLevel.DPI2: 1600,
    DpiLevel.DPI3: 2400,
    DpiLevel.DPI4: 3200,
    DpiLevel.DPI5: 4800,
    DpiLevel.DPI6: 6400,
    DpiLevel.DPI7: 7200,
    DpiLevel.DPI8: 8000,
}


class LedMode(str, Enum):
    DPI = "dpi"
    MULTI = "multi"
    RAINBOW = "rainbow"
    FLOE_LIGHT = "floe-light"
    WALTZ = "waltz"
    FOUR_SEASONS = "four-seasons"
    OFF = "off"


class LedStatus(str, Enum):
    ENABLE = "enable"
    DISABLE = "disable"


class LedBrightness(str, Enum):
    ALL = "all"
    HALF = "half"


class ContinuousFire(str, Enum):
    ENABLE = "enable"
    DISABLE = "disable"


class BreathingSpeed(str, Enum):
    BS1 = "bs1"
    BS2 = "bs2"
    BS3 = "bs3"
    BS4 = "bs4"
    BS5 = "bs5"
    BS6 = "bs6"
    BS7 = "bs7"
    BS8 = "bs8"


class WriteErrorPolicy(str, Enum):
    CONTINUE = "continue"
    ABORT = "abort"


SettingValue = Union[int, DpiLevel, LedMode, LedStatus, LedBrightness, ContinuousFire, BreathingSpeed]

BYTE_SETTINGS = (Setting.REPEAT, Setting.FIRING_INTERVAL)

ENUM_SETTINGS: dict[Setting, type[Enum]] = {
    Setting.LED_BRIGHTNESS: LedBrightness,
    Setting.CONTINUOUS_FIRE: ContinuousFire,
    Setting.BREATHING_SPEED: BreathingSpeed,
    Setting.DPI: DpiLevel,
    Setting.LED_MODE: LedMode,
    Setting.LED_STATUS: LedStatus,
}

# Stages 1-5 of every transaction, in the order the firmware expects them patched.
STAGE_SETTINGS = (
    Setting.REPEAT,
    Setting.FIRING_INTERVAL,
    Setting.LED_BRIGHTNESS,
    Setting.CONTINUOUS_FIRE,
    Setting.BREATHING_SPEED,
)

TERMINAL_SETTINGS = (Setting.DPI, Setting.LED_MODE, Setting.LED_STATUS)


@dataclass(frozen=True)
class Configuration:
    """One invocation's requested settings; ``None`` means "leave at baseline"."""

    repeat: int | None = None
    firing_interval: int | None = None
    led_brightness: LedBrightness | None = None
    continuous_fire: ContinuousFire | None = None
    breathing_speed: BreathingSpeed | None = None
    dpi: DpiLevel | None = None
    led_mode: LedMode | None = None
    led_status: LedStatus | None = None
    reset: bool = False

    def __post_init__(self) -> None:
        for setting in BYTE_SETTINGS:
            value = self.value_of(setting)
            if value is not None and not 0 <= value <= 255:
                raise ConfigurationError(f"{setting.value} must be within 0-255, got {value}")

        selectors = [s.value for s in TERMINAL_SETTINGS if self.value_of(s) is not None]
        if self.reset:
            requested = [f.name for f in fields(self) if f.name != "reset" and getattr(self, f.name) is not None]
            if requested:
                raise ConfigurationError(
                    f"reset cannot be combined with other settings: {', '.join(requested)}"
                )
        if len(selectors) > 1:
            raise ConfigurationError(f"Only one of dpi, led_mode, led_status may be set; got {', '.join(selectors)}")
        if selectors and self.breathing_speed is not None:
            raise ConfigurationError(
                f"breathing_speed cannot be combined with {selectors[0]}: both rewrite the LED mode frame"
            )

    def value_of(self, setting: Setting) -> SettingValue | None:
        return getattr(self, setting.value)

    @property
    def terminal(self) -> tuple[Setting, SettingValue] | None:
        for setting in TERMINAL_SETTINGS:
            value = self.value_of(setting)
            if value is not None:
                return setting, value
        return None

    @property
    def is_empty(self) -> bool:
        return not self.reset and all(self.value_of(s) is None for s in Setting)


@dataclass(frozen=True)
class Patch:
    """Frame-indexed replacement of ``len(data)`` bytes starting at ``offset``.

    When ``expect`` is set the patch only applies while the target span still
    holds exactly those bytes.
    """

    frame_index: int
    offset: int
    data: bytes
    expect: bytes | None = None


@dataclass(frozen=True)
class MatchRules:
    vendor_id: int
    product_id: int
    name_contains: tuple[str, ...] = ()


@dataclass(frozen=True)
class TransportSpec:
    type: str
    frame_length: int = 8
    settle_ms: int = 300
    on_write_error: WriteErrorPolicy = WriteErrorPolicy.CONTINUE


@dataclass(frozen=True)
class FieldSetting:
    frame_index: int
    offset: int
    baseline: int


@dataclass(frozen=True)
class FrameSetting:
    frame_indices: tuple[int, ...]
    placeholders: tuple[bytes, ...]
    values: dict[str, tuple[bytes, ...]]
    baseline: str | None


@dataclass(frozen=True)
class DeviceProfile:
    id: str
    name: str
    match: MatchRules
    transport: TransportSpec
    template: FrameSequence
    fields: dict[Setting, FieldSetting]
    frames: dict[Setting, FrameSetting]
    repeat_sentinel: int
    reset: dict[Setting, SettingValue] = field(default_factory=dict)

    def baseline(self, setting: Setting) -> SettingValue | None:
        if setting in self.fields:
            return self.fields[setting].baseline
        spec = self.frames[setting]
        if spec.baseline is None:
            return None
        return ENUM_SETTINGS[setting](spec.baseline)


@dataclass(frozen=True)
class DetectedDevice:
    vendor_id: int
    product_id: int
    name: str
    path: bytes | None = None

    @property
    def usb_id(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"


@dataclass(frozen=True)
class ResolvedTarget:
    device: DetectedDevice
    profile: DeviceProfile


@dataclass(frozen=True)
class FrameOutcome:
    index: int
    frame: bytes
    written: bool
    readback: bytes | None = None
    error: str | None = None


@dataclass(frozen=True)
class TransmitReport:
    outcomes: tuple[FrameOutcome, ...]
    total: int
    aborted: bool = False

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(
            f"frame {o.index} ({o.frame.hex()}): {o.error}" for o in self.outcomes if o.error is not None
        )

    @property
    def failed_writes(self) -> tuple[int, ...]:
        return tuple(o.index for o in self.outcomes if not o.written)

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.warnings:
            return "completed-with-warnings"
        return "completed"


@dataclass(frozen=True)
class ApplyResult:
    target: ResolvedTarget
    frames: FrameSequence
    report: TransmitReport
