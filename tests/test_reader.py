import logging
import socket
import time

import pytest

from f1_core.frame_decoder import FRAME_SIZE, encode_frame
from f1_core.model import CarSnapshot, CarTable, TelemetryFrame
from f1_core.reader import FrameReader
from f1_core.udp_source import TransportError, UdpTelemetrySource


class FakeSource:
    def __init__(self, datagrams):
        self._datagrams = list(datagrams)

    def receive(self):
        if not self._datagrams:
            return None
        return self._datagrams.pop(0)


def _packet(speed):
    frame = TelemetryFrame(speed=speed, cars=CarTable.of([CarSnapshot(current_lap_num=1)]))
    return encode_frame(frame)


def test_read_frames_drops_malformed_and_keeps_order():
    source = FakeSource([_packet(1.0), b"short", _packet(2.0), _packet(3.0) + b"\x00"])
    reader = FrameReader(source)

    frames = reader.read_frames()

    assert [f.speed for f in frames] == [1.0, 2.0]
    assert reader.frames_decoded == 2
    assert reader.frames_dropped == 2
    assert reader.read_frames() == []


def test_lenient_reader_accepts_trailing_bytes():
    reader = FrameReader(FakeSource([_packet(3.0) + b"\x00" * 4]), strict=False)
    assert [f.speed for f in reader.read_frames()] == [3.0]


def test_repeated_decode_error_logged_once(caplog):
    reader = FrameReader(FakeSource([]))
    with caplog.at_level(logging.INFO, logger="f1_core.reader"):
        for _ in range(5):
            assert reader.decode(b"\x00" * 10) is None
        assert reader.decode(b"\x00" * FRAME_SIZE) is not None

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    recoveries = [r for r in caplog.records if "recovered" in r.getMessage()]
    assert len(warnings) == 1
    assert len(recoveries) == 1
    assert "5 dropped" in recoveries[0].getMessage()


def test_read_frames_bounded_per_call():
    reader = FrameReader(FakeSource([_packet(float(i)) for i in range(5)]), max_per_read=2)
    assert len(reader.read_frames()) == 2
    assert len(reader.read_frames()) == 2
    assert len(reader.read_frames()) == 1


def test_receive_on_closed_source_raises():
    source = UdpTelemetrySource("127.0.0.1", 0)
    assert not source.is_open
    with pytest.raises(TransportError):
        source.receive()


def test_udp_source_receives_datagram():
    with UdpTelemetrySource("127.0.0.1", 0) as source:
        assert source.receive() is None
        port = source._sock.getsockname()[1]
        sender = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sender.sendto(b"ping", ("127.0.0.1", port))
        finally:
            sender.close()

        data = None
        for _ in range(100):
            data = source.receive()
            if data is not None:
                break
            time.sleep(0.01)
        assert data == b"ping"
    assert not source.is_open


def test_bind_failure_raises_transport_error():
    # 192.0.2.0/24 is reserved and never a local address
    blocked = UdpTelemetrySource("192.0.2.1", 20777)
    with pytest.raises(TransportError):
        blocked.open()
    assert not blocked.is_open
