from __future__ import annotations

import pytest

from redgearctl.core.errors import PatchError
from redgearctl.core.model import Patch
from redgearctl.core.patch import apply_patch, apply_patches, locate, substitute

FRAMES = (
    bytes.fromhex("0401000000000000"),
    bytes.fromhex("04070afd03a1fe03"),
    bytes.fromhex("040701fe817e807f"),
)


def test_apply_patch_returns_new_sequence_and_leaves_input_alone() -> None:
    frames = FRAMES
    patched = apply_patch(frames, Patch(frame_index=1, offset=4, data=b"\x05"))

    assert patched is not frames
    assert frames == FRAMES
    assert patched[1].hex() == "04070afd05a1fe03"
    assert patched[0] == frames[0]
    assert patched[2] == frames[2]


def test_apply_patch_keeps_frame_length() -> None:
    patched = apply_patch(FRAMES, Patch(frame_index=2, offset=0, data=bytes.fromhex("040705fd817e807f")))
    assert [len(f) for f in patched] == [8, 8, 8]


def test_patch_is_idempotent() -> None:
    patch = Patch(frame_index=1, offset=4, data=b"\x09")
    once = apply_patch(FRAMES, patch)
    assert apply_patch(once, patch) == once


def test_guarded_patch_is_noop_when_placeholder_is_gone() -> None:
    guarded = Patch(
        frame_index=2,
        offset=0,
        data=bytes.fromhex("040703fd817e807f"),
        expect=bytes.fromhex("040701fe817e807f"),
    )
    rewritten = apply_patch(FRAMES, Patch(frame_index=2, offset=0, data=bytes.fromhex("040701fe01fe807f")))

    assert apply_patch(rewritten, guarded) == rewritten
    assert apply_patch(FRAMES, guarded)[2].hex() == "040703fd817e807f"


def test_patch_outside_frame_rejected() -> None:
    with pytest.raises(PatchError):
        apply_patch(FRAMES, Patch(frame_index=0, offset=7, data=b"\x01\x02"))
    with pytest.raises(PatchError):
        apply_patch(FRAMES, Patch(frame_index=3, offset=0, data=b"\x01"))


def test_apply_patches_threads_results() -> None:
    patches = [
        Patch(frame_index=1, offset=4, data=b"\x07"),
        Patch(frame_index=1, offset=3, data=b"\xff"),
    ]
    assert apply_patches(FRAMES, patches)[1].hex() == "04070aff07a1fe03"
    assert apply_patches(FRAMES, []) == FRAMES


def test_substitute_replaces_only_matching_frames() -> None:
    result = substitute(FRAMES, bytes.fromhex("fd03"), bytes.fromhex("fd0a"))
    assert result[1].hex() == "04070afd0aa1fe03"
    assert result[0] == FRAMES[0]
    assert result[2] == FRAMES[2]


def test_substitute_missing_placeholder_is_noop() -> None:
    assert substitute(FRAMES, bytes.fromhex("deadbeef"), bytes.fromhex("00000000")) == FRAMES


def test_substitute_rejects_length_change() -> None:
    with pytest.raises(PatchError):
        substitute(FRAMES, bytes.fromhex("fd03"), bytes.fromhex("fd"))


def test_locate_finds_equal_frames() -> None:
    assert locate(FRAMES, bytes.fromhex("040701fe817e807f")) == (2,)
    assert locate(FRAMES, bytes.fromhex("ffffffffffffffff")) == ()
