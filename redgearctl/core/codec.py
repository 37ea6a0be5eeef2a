"""Setting encoders: each maps one typed value to the patches that carry it."""

from __future__ import annotations

from redgearctl.core.model import (
    ContinuousFire,
    DeviceProfile,
    Patch,
    Setting,
    SettingValue,
)


def encode_byte_field(profile: DeviceProfile, setting: Setting, value: int) -> tuple[Patch, ...]:
    spec = profile.fields[setting]
    return (Patch(frame_index=spec.frame_index, offset=spec.offset, data=bytes([value])),)


def encode_frames(profile: DeviceProfile, setting: Setting, value: SettingValue) -> tuple[Patch, ...]:
    """Whole-frame replacement, one patch per placeholder frame.

    Each patch is guarded by its placeholder, so a frame already rewritten by
    an earlier stage is left alone.
    """
    spec = profile.frames[setting]
    replacements = spec.values[value.value]
    return tuple(
        Patch(frame_index=index, offset=0, data=replacement, expect=placeholder)
        for index, placeholder, replacement in zip(spec.frame_indices, spec.placeholders, replacements)
    )


def encode_continuous_fire(profile: DeviceProfile, state: ContinuousFire) -> tuple[Patch, ...]:
    """Continuous fire is a composite encoding.

    Enabling it also overwrites the repeat-count field with the disabling
    sentinel, whatever repeat value was patched before.
    """
    patches = encode_frames(profile, Setting.CONTINUOUS_FIRE, state)
    if state is ContinuousFire.ENABLE:
        repeat = profile.fields[Setting.REPEAT]
        patches += (
            Patch(
                frame_index=repeat.frame_index,
                offset=repeat.offset,
                data=bytes([profile.repeat_sentinel]),
            ),
        )
    return patches


def encode(profile: DeviceProfile, setting: Setting, value: SettingValue) -> tuple[Patch, ...]:
    if setting in profile.fields:
        return encode_byte_field(profile, setting, int(value))
    if setting is Setting.CONTINUOUS_FIRE:
        return encode_continuous_fire(profile, ContinuousFire(value))
    return encode_frames(profile, setting, value)
