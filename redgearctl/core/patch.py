"""Pure frame patching: every call returns a new frame sequence."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from redgearctl.core.errors import PatchError
from redgearctl.core.model import FrameSequence, Patch

LOGGER = logging.getLogger(__name__)


def apply_patch(frames: FrameSequence, patch: Patch) -> FrameSequence:
    if not 0 <= patch.frame_index < len(frames):
        raise PatchError(f"Patch targets frame {patch.frame_index} but the sequence has {len(frames)} frames")

    frame = frames[patch.frame_index]
    end = patch.offset + len(patch.data)
    if patch.offset < 0 or end > len(frame):
        raise PatchError(
            f"Patch of {len(patch.data)} bytes at offset {patch.offset} does not fit "
            f"{len(frame)}-byte frame {patch.frame_index}"
        )
    if patch.expect is not None and frame[patch.offset:end] != patch.expect:
        LOGGER.debug(
            "Frame %d holds %s, not %s; patch skipped",
            patch.frame_index,
            frame.hex(),
            patch.expect.hex(),
        )
        return frames

    patched = frame[: patch.offset] + patch.data + frame[end:]
    return frames[: patch.frame_index] + (patched,) + frames[patch.frame_index + 1 :]


def apply_patches(frames: FrameSequence, patches: Iterable[Patch]) -> FrameSequence:
    """Apply ``patches`` in order, threading each result into the next patch."""
    result = tuple(frames)
    for patch in patches:
        result = apply_patch(result, patch)
    return result


def substitute(frames: FrameSequence, placeholder: bytes, replacement: bytes) -> FrameSequence:
    """Replace ``placeholder`` with ``replacement`` wherever it occurs in any frame.

    Frames without a match are returned unchanged. A missing placeholder is not
    an error.
    """
    if len(placeholder) != len(replacement):
        raise PatchError(
            f"Replacement is {len(replacement)} bytes but placeholder is {len(placeholder)} bytes"
        )
    if not placeholder:
        raise PatchError("Placeholder must not be empty")
    return tuple(frame.replace(placeholder, replacement) for frame in frames)


def locate(frames: FrameSequence, placeholder: bytes) -> tuple[int, ...]:
    """Return the indices of the frames equal to ``placeholder``."""
    return tuple(index for index, frame in enumerate(frames) if frame == placeholder)
