"""Fixed-order composition of setting patches into a full transaction."""

from __future__ import annotations

import logging

from redgearctl.core.codec import encode
from redgearctl.core.model import (
    STAGE_SETTINGS,
    Configuration,
    DeviceProfile,
    FrameSequence,
    Patch,
)
from redgearctl.core.patch import apply_patches

LOGGER = logging.getLogger(__name__)


def reset_configuration(profile: DeviceProfile) -> Configuration:
    return Configuration(**{setting.value: value for setting, value in profile.reset.items()})


def plan_patches(profile: DeviceProfile, config: Configuration) -> tuple[Patch, ...]:
    """Return every patch for ``config`` in application order.

    Stages run repeat, firing interval, LED brightness, continuous fire and
    breathing speed, then the terminal selector if one is set. An unset stage
    encodes the profile baseline; a stage without a baseline is skipped.
    """
    if config.reset:
        config = reset_configuration(profile)

    patches: list[Patch] = []
    for setting in STAGE_SETTINGS:
        value = config.value_of(setting)
        if value is None:
            value = profile.baseline(setting)
        if value is None:
            continue
        patches.extend(encode(profile, setting, value))

    terminal = config.terminal
    if terminal is not None:
        patches.extend(encode(profile, *terminal))
    return tuple(patches)


def build_frames(profile: DeviceProfile, config: Configuration) -> FrameSequence:
    patches = plan_patches(profile, config)
    frames = apply_patches(profile.template, patches)
    changed = sum(1 for before, after in zip(profile.template, frames) if before != after)
    LOGGER.debug("Built %d frames for %s, %d differ from the template", len(frames), profile.id, changed)
    return frames
