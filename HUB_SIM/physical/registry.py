"""
Station registry for the Shared-Medium Hub Simulator.
"""

import threading

from HUB_SIM.config import MAX_STNS
from HUB_SIM.errors import CapacityExceeded, RegistrySealedError, TransportFault
from HUB_SIM.utils.logging_config import setup_logger


class Station:
    """A station as seen by the hub: where to read its traffic and where to deliver traffic to it."""

    def __init__(self, index, transmit, receive, name):
        self.index = index
        self.name = name
        self.transmit = transmit  # hub reads from it
        self.receive = receive  # hub writes to it
        self.receive_lock = threading.Lock()  # one relay at a time per receiver

    def __str__(self):
        return f"Station({self.index}, {self.name})"


class StationRegistry:
    """
    Ordered, append-only table of the stations connected to the hub.

    The table is filled before relaying starts and sealed afterwards, so
    listener threads read it without locking.  Writes to one station's
    receive endpoint are serialized by that station's lock.
    """

    def __init__(self, capacity=MAX_STNS, name="hub"):
        self.capacity = capacity
        self.name = name
        self._stations = []
        self._sealed = False
        self.logger = setup_logger(f"Registry_{name}", f"registry_{name}")

    def register(self, transmit, receive, name=None):
        """Append a station and return its index."""
        if self._sealed:
            raise RegistrySealedError(f"Cannot register a station on {self.name}: relaying has started")
        if self.is_full:
            self.logger.error(f"Registration rejected: {self.name} already has {self.capacity} stations")
            raise CapacityExceeded(self.capacity)

        index = len(self._stations)
        station = Station(index, transmit, receive, name or f"stn{index}")
        self._stations.append(station)
        self.logger.info(f"Registered {station}")
        return index

    def seal(self):
        self._sealed = True

    @property
    def sealed(self):
        return self._sealed

    @property
    def is_full(self):
        return len(self._stations) >= self.capacity

    def broadcast(self, sender_index, payload):
        """Write payload to every station except the sender; returns how many were reached."""
        delivered = 0
        for station in self._stations:
            if station.index == sender_index:
                continue
            try:
                with station.receive_lock:
                    station.receive.write(payload)
                delivered += 1
            except TransportFault as e:
                self.logger.error(f"Relay to {station} failed: {e}")
        self.logger.debug(f"Relayed {len(payload)} bytes from station {sender_index} to {delivered} station(s)")
        return delivered

    def __len__(self):
        return len(self._stations)

    def __iter__(self):
        return iter(list(self._stations))

    def __getitem__(self, index):
        return self._stations[index]
