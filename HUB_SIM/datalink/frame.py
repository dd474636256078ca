"""
Frame implementation for the Shared-Medium Hub Simulator.

Wire format (no length prefix, no escaping):

    STX dest src '-' payload ETX        e.g.  @BA-hello~

The payload must not contain ETX.  An acknowledgement is a frame whose
payload starts with "Ack".
"""

from enum import Enum

from HUB_SIM.config import (
    STX, ETX, SEPARATOR, ACKNOWLEDGEMENT, DEST_POS, SRC_POS, MSG_POS, FRAME_BUFFER_SIZE,
)
from HUB_SIM.utils.logging_config import setup_logger

STX_BYTE = ord(STX)
ETX_BYTE = ord(ETX)
ACK_BYTES = ACKNOWLEDGEMENT.encode('ascii')


class FrameType(Enum):
    """Enum for different frame types"""
    DATA = 1
    ACK = 2


class DecodeStatus(Enum):
    """Outcome of one decode call on a frame buffer"""
    EMPTY = 1  # nothing complete to decode yet
    MALFORMED = 2  # garbage skipped up to the next marker
    NOT_FOR_ME = 3  # complete frame for another station, skipped
    ACK = 4
    MESSAGE = 5


class DecodeResult:
    """One decoded event; source_id and payload are set for ACK and MESSAGE."""

    def __init__(self, status, source_id=None, payload=None, skipped=b""):
        self.status = status
        self.source_id = source_id
        self.payload = payload
        self.skipped = skipped

    def __eq__(self, other):
        if not isinstance(other, DecodeResult):
            return NotImplemented
        return (self.status, self.source_id, self.payload) == \
            (other.status, other.source_id, other.payload)

    def __repr__(self):
        if self.status == DecodeStatus.MESSAGE:
            return f"DecodeResult(MESSAGE, {self.source_id!r}, {self.payload!r})"
        if self.status == DecodeStatus.ACK:
            return f"DecodeResult(ACK, {self.source_id!r})"
        return f"DecodeResult({self.status.name})"


def is_station_id(value):
    """A station identifier is one printable ASCII character other than the frame markers."""
    return (isinstance(value, str) and len(value) == 1 and value.isascii()
            and value.isprintable() and value not in (STX, ETX))


def _check_station_id(value, role):
    if not is_station_id(value):
        raise ValueError(f"{role} identifier must be a single printable character other than "
                         f"{STX!r} and {ETX!r}, got {value!r}")


def encode_frame(destination_id, source_id, payload):
    """Encode one frame: STX dest src '-' payload ETX."""
    _check_station_id(destination_id, "Destination")
    _check_station_id(source_id, "Source")
    if ETX in payload:
        raise ValueError(f"Payload must not contain the end-of-frame marker {ETX!r}")
    return f"{STX}{destination_id}{source_id}{SEPARATOR}{payload}{ETX}".encode('utf-8')


class Frame:
    """Represents a data frame at the Data Link Layer"""

    def __init__(self, destination_id, source_id, data, frame_type=None):
        self.destination_id = destination_id
        self.source_id = source_id
        self.data = data
        if frame_type is None:
            frame_type = FrameType.ACK if data.startswith(ACKNOWLEDGEMENT) else FrameType.DATA
        self.frame_type = frame_type

    def encode(self):
        """Return the bytes written on the wire for this frame"""
        return encode_frame(self.destination_id, self.source_id, self.data)

    def create_ack(self):
        """Create an acknowledgment frame for this frame"""
        return Frame(self.source_id, self.destination_id, ACKNOWLEDGEMENT, FrameType.ACK)

    def __str__(self):
        type_str = self.frame_type.name
        if len(self.data) > 20:
            data_preview = self.data[:20] + "..."
        else:
            data_preview = self.data
        return f"Frame[{type_str}] {self.source_id}-->{self.destination_id}: {data_preview}"


class FrameBuffer:
    """
    Raw bytes received by one station and not yet decoded.

    Bytes left over after a decode stay at the head of the buffer for the
    next call.  Filling the buffer (feed) is the reader's job; decode never
    reads and never blocks.
    """

    def __init__(self, capacity=FRAME_BUFFER_SIZE, name="stn"):
        self.capacity = capacity
        self.name = name
        self._data = bytearray()
        self.logger = setup_logger("FrameCodec", "frames")

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def feed(self, data):
        """Append newly read bytes, dropping an oversized partial frame first."""
        if len(self._data) + len(data) > self.capacity:
            self.logger.warning(f"{self.name}: frame buffer overflow, discarding {len(self._data)} "
                                f"buffered bytes >{self._preview(self._data)}<")
            self._data.clear()
            if len(data) > self.capacity:
                self.logger.warning(f"{self.name}: read larger than frame buffer, "
                                    f"discarding {len(data) - self.capacity} bytes")
                data = data[-self.capacity:]
        self._data.extend(data)

    def decode(self, station_id):
        """Consume at most one frame from the head of the buffer."""
        buf = self._data
        if not buf:
            return DecodeResult(DecodeStatus.EMPTY)

        if buf[0] != STX_BYTE:
            return self._resynchronize()

        end = buf.find(ETX_BYTE)
        if end == -1:
            # Frame started but its ETX has not arrived yet
            return DecodeResult(DecodeStatus.EMPTY)

        frame = bytes(buf[:end + 1])
        del buf[:end + 1]

        if end < MSG_POS:
            self.logger.warning(f"{self.name}: frame header too short: >{self._preview(frame)}<")
            return DecodeResult(DecodeStatus.MALFORMED, skipped=frame)

        destination = chr(frame[DEST_POS])
        source = chr(frame[SRC_POS])
        if not (is_station_id(destination) and is_station_id(source)):
            self.logger.warning(f"{self.name}: bad station identifier in header: >{self._preview(frame)}<")
            return DecodeResult(DecodeStatus.MALFORMED, skipped=frame)

        if destination != station_id:
            self.logger.debug(f"{self.name}: skipping frame destined to {destination}: >{self._preview(frame)}<")
            return DecodeResult(DecodeStatus.NOT_FOR_ME, source_id=source, skipped=frame)

        payload = frame[MSG_POS:-1]
        if payload.startswith(ACK_BYTES):
            return DecodeResult(DecodeStatus.ACK, source_id=source)
        return DecodeResult(DecodeStatus.MESSAGE, source_id=source,
                            payload=payload.decode('utf-8', errors='replace'))

    def _resynchronize(self):
        """Drop bytes up to the next marker: through an ETX, or up to an STX."""
        buf = self._data
        etx = buf.find(ETX_BYTE)
        stx = buf.find(STX_BYTE)
        if etx != -1 and (stx == -1 or etx < stx):
            cut = etx + 1
        elif stx != -1:
            cut = stx
        else:
            cut = len(buf)
        garbage = bytes(buf[:cut])
        del buf[:cut]
        self.logger.warning(f"{self.name}: no STX: >{self._preview(garbage)}<")
        return DecodeResult(DecodeStatus.MALFORMED, skipped=garbage)

    @staticmethod
    def _preview(data):
        text = bytes(data).decode('utf-8', errors='replace')
        return text if len(text) <= 40 else text[:40] + "..."


def decode_frame(buffer, station_id):
    """Decode one frame from a FrameBuffer (or raw bytes wrapped in a new one)."""
    if not isinstance(buffer, FrameBuffer):
        data = buffer
        buffer = FrameBuffer()
        buffer.feed(data)
    return buffer.decode(station_id)
