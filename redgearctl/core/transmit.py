"""Sequential feature-report transmission of a frame sequence."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from redgearctl.core.errors import TransportError
from redgearctl.core.model import (
    FrameOutcome,
    FrameSequence,
    TransmitReport,
    WriteErrorPolicy,
)
from redgearctl.transports.base import FeatureReportDevice

LOGGER = logging.getLogger(__name__)

DEFAULT_SETTLE_S = 0.3


def transmit(
    frames: FrameSequence,
    device: FeatureReportDevice,
    *,
    settle_s: float = DEFAULT_SETTLE_S,
    on_write_error: WriteErrorPolicy = WriteErrorPolicy.CONTINUE,
    sleep: Callable[[float], None] = time.sleep,
) -> TransmitReport:
    """Write each frame, wait ``settle_s``, then read it back.

    No retries. Read-back failures are only logged. A write failure skips that
    frame's read-back and either moves on or stops the loop, per
    ``on_write_error``.
    """
    outcomes: list[FrameOutcome] = []
    for index, frame in enumerate(frames):
        LOGGER.debug("> SET_REPORT [%d] %s", index, frame.hex())
        try:
            device.send_feature_report(frame)
        except TransportError as exc:
            LOGGER.warning("Frame %d write failed: %s", index, exc)
            outcomes.append(FrameOutcome(index=index, frame=frame, written=False, error=str(exc)))
            if on_write_error is WriteErrorPolicy.ABORT:
                return TransmitReport(outcomes=tuple(outcomes), total=len(frames), aborted=True)
            continue

        sleep(settle_s)

        try:
            readback = device.get_feature_report(frame)
        except TransportError as exc:
            LOGGER.warning("Frame %d read-back failed: %s", index, exc)
            outcomes.append(FrameOutcome(index=index, frame=frame, written=True, error=str(exc)))
            continue

        LOGGER.debug("< GET_REPORT [%d] %s", index, readback.hex())
        outcomes.append(FrameOutcome(index=index, frame=frame, written=True, readback=readback))

    return TransmitReport(outcomes=tuple(outcomes), total=len(frames))
