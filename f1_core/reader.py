"""
reader.py

FrameReader: drains datagrams from a UdpTelemetrySource and decodes them into
TelemetryFrame objects. All packet parsing lives in frame_decoder; this module
only sequences it and decides what happens to packets that do not decode.

A malformed datagram is dropped and logged; it never stops the stream. The
first failure of a given kind is logged as a warning, repeats are counted
silently, and recovery is logged once the next good packet arrives.
"""

import logging
log = logging.getLogger(__name__)

from typing import Callable, List, Optional

from f1_core.frame_decoder import DecodeError, decode_frame
from f1_core.model import TelemetryFrame
from f1_core.udp_source import UdpTelemetrySource

# Upper bound on datagrams handled per read_frames() call so one tick
# cannot starve the worker's event loop under a flood.
MAX_DATAGRAMS_PER_READ = 256


class FrameReader:
    """
    FrameReader reads datagrams from a source and returns decoded frames.

    It is constructed with an opened UdpTelemetrySource (anything with a
    ``receive() -> Optional[bytes]`` method works).
    """

    def __init__(
        self,
        source: UdpTelemetrySource,
        *,
        strict: bool = True,
        decoder: Callable[..., TelemetryFrame] = decode_frame,
        max_per_read: int = MAX_DATAGRAMS_PER_READ,
    ):
        self._source = source
        self._strict = strict
        self._decoder = decoder
        self._max_per_read = max(1, int(max_per_read))
        self._last_decode_error: Optional[str] = None
        self._decode_error_count = 0
        self.frames_decoded = 0
        self.frames_dropped = 0

    def decode(self, data: bytes) -> Optional[TelemetryFrame]:
        """Decode one datagram; returns None (and logs) if it is malformed."""
        try:
            frame = self._decoder(data, strict=self._strict)
        except DecodeError as e:
            self.frames_dropped += 1
            err_str = str(e)
            # log this specific error only the first time it happens
            if err_str != self._last_decode_error:
                log.warning(f"Dropped telemetry packet: {err_str}")
                self._last_decode_error = err_str
                self._decode_error_count = 1
            else:
                self._decode_error_count += 1
            return None

        if self._last_decode_error is not None:
            log.info(f"Telemetry decode recovered after {self._decode_error_count} dropped packets")
            self._last_decode_error = None
            self._decode_error_count = 0

        self.frames_decoded += 1
        return frame

    def read_frames(self) -> List[TelemetryFrame]:
        """Drain pending datagrams and return the decoded frames in arrival order."""
        frames: List[TelemetryFrame] = []
        for _ in range(self._max_per_read):
            data = self._source.receive()
            if data is None:
                break
            frame = self.decode(data)
            if frame is not None:
                frames.append(frame)
        return frames
