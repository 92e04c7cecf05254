import pytest

from pipelaunch.ipc.framing import FrameBuffer
from pipelaunch.ipc.framing import pack_frame


def test_pack_frame_appends_delimiter():
    assert pack_frame(b'{"id":7}') == b'{"id":7}\x00'
    assert pack_frame(b"") == b"\x00"


def test_pack_frame_rejects_embedded_delimiter():
    with pytest.raises(ValueError):
        pack_frame(b"a\x00b")


def test_frame_buffer_yields_frames_in_order():
    buf = FrameBuffer()
    buf.feed(b"one\x00tw")
    assert buf.take() == b"one"
    assert buf.take() is None
    buf.feed(b"o\x00")
    assert buf.take() == b"two"
    assert len(buf) == 0


def test_frame_buffer_clear_reports_partial_bytes():
    buf = FrameBuffer()
    buf.feed(b"incomplete")
    assert buf.take() is None
    assert buf.clear() == len(b"incomplete")
    assert buf.take() is None
