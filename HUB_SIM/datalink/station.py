"""
Station implementation for the Shared-Medium Hub Simulator.

A station sends its configured messages one at a time to a single
destination and waits for an acknowledgement between them (stop-and-wait).
Every message it receives is reported and acknowledged at once.  The
station keeps answering traffic after its own queue is exhausted and stops
only when its inbound channel is closed.

There is no acknowledgement timeout and no retransmission: a station whose
acknowledgement never arrives keeps receiving but never sends again.
"""

import os
from enum import Enum

from HUB_SIM.config import READ_SIZE, FRAME_BUFFER_SIZE
from HUB_SIM.datalink.frame import Frame, FrameBuffer, DecodeStatus
from HUB_SIM.errors import TransportFault
from HUB_SIM.utils.logging_config import setup_logger


class SendState(Enum):
    """Whether the next queued message may be transmitted"""
    READY_TO_SEND = 1
    WAITING_FOR_ACK = 2


class StationAgent:
    """Protocol engine of one station: send, receive, acknowledge."""

    def __init__(self, station_id, destination_id, messages, inbound, outbound,
                 read_size=READ_SIZE, buffer_size=FRAME_BUFFER_SIZE):
        self.station_id = station_id
        self.destination_id = destination_id
        self.messages = tuple(messages)
        self.inbound = inbound
        self.outbound = outbound
        self.read_size = read_size
        self.frame_buffer = FrameBuffer(buffer_size, name=f"stn({station_id})")

        # Send state
        self.ack_pending = False
        self.cursor = 0

        self.received_messages = []  # (source_id, payload) in arrival order
        self.stray_acks = []  # sources of acknowledgements not from our destination
        self.malformed_frames = 0
        self.pid = os.getpid()
        self.logger = setup_logger(f"Station_{station_id}", f"station_{station_id}")

    @property
    def state(self):
        return SendState.WAITING_FOR_ACK if self.ack_pending else SendState.READY_TO_SEND

    @property
    def queue_exhausted(self):
        return self.cursor >= len(self.messages)

    def _tag(self):
        return f"Station {self.station_id} ({self.pid})"

    def send_next(self):
        """Transmit the next queued message if no acknowledgement is pending."""
        if self.ack_pending or self.queue_exhausted:
            return False

        message = self.messages[self.cursor]
        frame = Frame(self.destination_id, self.station_id, message)
        self.logger.info(f"{self._tag()}: Sent to station {self.destination_id} >{message}<")
        self.outbound.write(frame.encode())
        self.ack_pending = True  # cleared at the arrival of an ack
        self.cursor += 1
        return True

    def receive(self):
        """
        Block until an acknowledgement or a message for this station arrives.

        Frames for other stations and garbage are skipped.  New bytes are read
        only when nothing decodable is left in the frame buffer.  Returns None
        once the inbound channel is closed.
        """
        while True:
            result = self.frame_buffer.decode(self.station_id)

            if result.status in (DecodeStatus.ACK, DecodeStatus.MESSAGE):
                return result
            if result.status == DecodeStatus.MALFORMED:
                self.malformed_frames += 1
                continue
            if result.status == DecodeStatus.NOT_FOR_ME:
                continue

            data = self.inbound.read(self.read_size)  # blocks when the channel is empty
            if not data:
                return None
            self.frame_buffer.feed(data)

    def handle(self, result):
        """Apply one received acknowledgement or message to the send state."""
        source = result.source_id
        if result.status == DecodeStatus.ACK:
            if source == self.destination_id:
                self.ack_pending = False
                self.logger.info(f"{self._tag()}: Received from station {source} an acknowledgement")
            else:
                self.stray_acks.append(source)
                self.logger.info(f"{self._tag()}: received an Ack from {source} - ignored")

        elif result.status == DecodeStatus.MESSAGE:
            self.received_messages.append((source, result.payload))
            self.logger.info(f"{self._tag()}: Received from station {source} >{result.payload}<")
            received = Frame(self.station_id, source, result.payload)
            self.outbound.write(received.create_ack().encode())

        else:
            self.logger.error(f"{self._tag()}: unexpected decode result {result!r}")

    def step(self):
        """One loop iteration; returns False when the inbound channel has closed."""
        self.send_next()
        result = self.receive()
        if result is None:
            return False
        self.handle(result)
        return True

    def run(self):
        """Run until the inbound channel closes or the transport fails."""
        self.logger.info(f"{self._tag()}: sending {len(self.messages)} message(s) to station {self.destination_id}")
        try:
            while self.step():
                pass
        except TransportFault as e:
            self.logger.error(f"{self._tag()}: {e}")
            return False
        self.logger.info(f"{self._tag()}: channel closed, terminating")
        return True

    def __str__(self):
        return (f"StationAgent({self.station_id}->{self.destination_id}, "
                f"{self.cursor}/{len(self.messages)} sent, {self.state.name})")
