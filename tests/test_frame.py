"""Tests for frame encoding, decoding and frame-buffer resynchronization."""

import logging

import pytest

from HUB_SIM.datalink.frame import (
    DecodeResult,
    DecodeStatus,
    Frame,
    FrameBuffer,
    FrameType,
    decode_frame,
    encode_frame,
)


def _buffer(*chunks, capacity=1024):
    buf = FrameBuffer(capacity, name="test")
    for chunk in chunks:
        buf.feed(chunk)
    return buf


# ---------------------------------------------------------------------------
# encode_frame / Frame
# ---------------------------------------------------------------------------


class TestEncode:
    def test_wire_format(self):
        assert encode_frame("B", "A", "hello") == b"@BA-hello~"

    def test_ack_frame(self):
        assert encode_frame("A", "B", "Ack") == b"@AB-Ack~"

    def test_empty_payload(self):
        assert encode_frame("B", "A", "") == b"@BA-~"

    def test_payload_with_etx_rejected(self):
        with pytest.raises(ValueError):
            encode_frame("B", "A", "bad~payload")

    @pytest.mark.parametrize("bad_id", ["", "AB", "\n", 7, "@", "~", "\u00e9"])
    def test_invalid_identifiers_rejected(self, bad_id):
        with pytest.raises(ValueError):
            encode_frame(bad_id, "A", "x")
        with pytest.raises(ValueError):
            encode_frame("B", bad_id, "x")


class TestFrame:
    def test_type_inferred_from_payload(self):
        assert Frame("B", "A", "hello").frame_type == FrameType.DATA
        assert Frame("B", "A", "Ack").frame_type == FrameType.ACK

    def test_create_ack_answers_the_source(self):
        ack = Frame("B", "A", "hello").create_ack()
        assert ack.destination_id == "A"
        assert ack.source_id == "B"
        assert ack.frame_type == FrameType.ACK
        assert ack.encode() == b"@AB-Ack~"

    def test_str_truncates_long_payloads(self):
        text = str(Frame("B", "A", "x" * 50))
        assert "A-->B" in text
        assert text.endswith("...")


# ---------------------------------------------------------------------------
# FrameBuffer.decode
# ---------------------------------------------------------------------------


class TestDecode:
    def test_empty_buffer(self):
        assert _buffer().decode("A").status == DecodeStatus.EMPTY

    @pytest.mark.parametrize("payload", ["hello", "", "a-b", "mid@stx", "héllo wörld", "Hello Ack"])
    def test_encode_then_decode_returns_message(self, payload):
        buf = _buffer(encode_frame("B", "A", payload))
        assert buf.decode("B") == DecodeResult(DecodeStatus.MESSAGE, "A", payload)
        assert len(buf) == 0

    def test_ack(self):
        result = _buffer(b"@AB-Ack~").decode("A")
        assert result.status == DecodeStatus.ACK
        assert result.source_id == "B"
        assert result.payload is None

    def test_ack_marker_is_a_prefix(self):
        assert _buffer(b"@AB-Acknowledged~").decode("A").status == DecodeStatus.ACK

    def test_not_for_me_is_consumed_and_rest_kept(self):
        buf = _buffer(b"@CB-for C~@AB-for A~")
        first = buf.decode("A")
        assert first.status == DecodeStatus.NOT_FOR_ME
        assert bytes(buf) == b"@AB-for A~"
        assert buf.decode("A") == DecodeResult(DecodeStatus.MESSAGE, "B", "for A")

    def test_one_frame_per_call(self):
        buf = _buffer(b"@AB-one~@AB-two~@AC-Ack~")
        assert buf.decode("A").payload == "one"
        assert buf.decode("A").payload == "two"
        assert buf.decode("A") == DecodeResult(DecodeStatus.ACK, "C")
        assert buf.decode("A").status == DecodeStatus.EMPTY

    def test_partial_frame_waits_for_more_bytes(self):
        buf = _buffer(b"@AB-hel")
        assert buf.decode("A").status == DecodeStatus.EMPTY
        assert bytes(buf) == b"@AB-hel"
        buf.feed(b"lo~")
        assert buf.decode("A") == DecodeResult(DecodeStatus.MESSAGE, "B", "hello")

    def test_decode_frame_accepts_raw_bytes(self):
        assert decode_frame(b"@BA-hi~", "B") == DecodeResult(DecodeStatus.MESSAGE, "A", "hi")


class TestResynchronization:
    def test_corrupted_frame_followed_by_valid_frame(self, caplog):
        buf = _buffer(b"AB-lost~@AB-kept~")
        with caplog.at_level(logging.WARNING):
            first = buf.decode("A")
        assert first.status == DecodeStatus.MALFORMED
        assert first.skipped == b"AB-lost~"
        assert "no STX" in caplog.text

        assert buf.decode("A") == DecodeResult(DecodeStatus.MESSAGE, "B", "kept")
        assert buf.decode("A").status == DecodeStatus.EMPTY

    def test_garbage_skipped_up_to_next_stx(self):
        buf = _buffer(b"xyz@AB-hi~")
        result = buf.decode("A")
        assert result.status == DecodeStatus.MALFORMED
        assert result.skipped == b"xyz"
        assert buf.decode("A").payload == "hi"

    def test_garbage_without_markers_is_dropped(self):
        buf = _buffer(b"junk")
        assert buf.decode("A").status == DecodeStatus.MALFORMED
        assert len(buf) == 0

    @pytest.mark.parametrize("header", [b"@A\xc3-", b"@\x01B-", b"@A@-"])
    def test_bad_identifier_byte_in_header(self, header, caplog):
        buf = _buffer(header + b"hi~@AB-next~")
        with caplog.at_level(logging.WARNING):
            assert buf.decode("A").status == DecodeStatus.MALFORMED
        assert "bad station identifier" in caplog.text
        assert buf.decode("A") == DecodeResult(DecodeStatus.MESSAGE, "B", "next")

    def test_header_too_short(self):
        buf = _buffer(b"@A~@AB-ok~")
        assert buf.decode("A").status == DecodeStatus.MALFORMED
        assert buf.decode("A").payload == "ok"


class TestOverflow:
    def test_oversized_partial_frame_is_discarded(self, caplog):
        buf = _buffer(b"@AB-" + b"x" * 10, capacity=16)
        assert buf.decode("A").status == DecodeStatus.EMPTY

        with caplog.at_level(logging.WARNING):
            buf.feed(b"y" * 5)
        assert "overflow" in caplog.text
        assert bytes(buf) == b"yyyyy"
        assert buf.decode("A").status == DecodeStatus.MALFORMED

    def test_recovers_on_next_frame_after_overflow(self):
        buf = _buffer(b"@AB-" + b"x" * 10, capacity=16)
        buf.feed(b"zz~@AB-ok~")
        assert buf.decode("A").status == DecodeStatus.MALFORMED
        assert buf.decode("A") == DecodeResult(DecodeStatus.MESSAGE, "B", "ok")

    def test_single_read_larger_than_capacity_keeps_the_tail(self):
        buf = _buffer(capacity=8)
        buf.feed(b"0123456789")
        assert bytes(buf) == b"23456789"
