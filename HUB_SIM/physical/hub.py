"""
Hub implementation for the Shared-Medium Hub Simulator.

The hub relays whatever one station transmits to every other station,
like a single Ethernet/802.3 collision domain.  One listener thread per
station reads its transmission channel; all listeners share one stop
event, checked between reads.
"""

import threading

from HUB_SIM.config import READ_SIZE, LISTENER_POLL_INTERVAL, LISTENER_JOIN_TIMEOUT, MAX_STNS
from HUB_SIM.errors import TransportFault
from HUB_SIM.physical.registry import StationRegistry
from HUB_SIM.utils.logging_config import setup_logger


class ListenerPool:
    """One listener thread per registered station, cancelled together."""

    def __init__(self, registry, poll_interval=LISTENER_POLL_INTERVAL, read_size=READ_SIZE):
        self.registry = registry
        self.poll_interval = poll_interval
        self.read_size = read_size
        self.stop_event = threading.Event()
        self.threads = []
        self.listeners = {}  # station index -> thread
        self.logger = setup_logger(f"Listeners_{registry.name}", f"listeners_{registry.name}")

    def start(self):
        """Seal the registry and launch a listener for every station."""
        if self.threads:
            raise RuntimeError("Listener pool already started")
        self.registry.seal()
        self.stop_event.clear()

        for station in self.registry:
            thread = threading.Thread(
                target=self._listen,
                args=(station,),
                name=f"listen-{station.name}",
            )
            thread.daemon = True
            self.threads.append(thread)
            self.listeners[station.index] = thread
            thread.start()

        self.logger.info(f"Started {len(self.threads)} listener thread(s)")

    def _listen(self, station):
        """Relay everything read from one station's transmission channel."""
        endpoint = station.transmit
        while not self.stop_event.is_set():
            try:
                if not endpoint.wait_readable(self.poll_interval):
                    continue
                data = endpoint.read(self.read_size)
            except TransportFault as e:
                self.logger.error(f"Fatal error in reading from {station}: {e}")
                return

            if not data:
                self.logger.info(f"Pipe closed by {station}")
                return

            # A read is not frame-aligned: relay exactly the bytes read
            self.logger.debug(f"Received from {station} >{data!r}<")
            self.registry.broadcast(station.index, data)

        self.logger.debug(f"Listener for {station} cancelled")

    def stop(self, timeout=LISTENER_JOIN_TIMEOUT):
        """Cancel every listener and wait for them to finish."""
        self.stop_event.set()
        for thread in self.threads:
            thread.join(timeout=timeout)
            if thread.is_alive():
                self.logger.warning(f"{thread.name} did not stop within {timeout:.1f}s")
        self.logger.info(f"Stopped {len(self.threads)} listener thread(s)")

    def run_for(self, duration):
        """Relay for a fixed duration, then stop all listeners."""
        self.stop_event.wait(duration)
        self.stop()

    def is_listening(self, index):
        thread = self.listeners.get(index)
        return thread is not None and thread.is_alive()

    @property
    def active_count(self):
        return sum(1 for thread in self.threads if thread.is_alive())

    @property
    def is_running(self):
        return bool(self.threads) and not self.stop_event.is_set() and self.active_count > 0


class Hub:
    """Implements a basic hub that broadcasts data to all connected stations."""

    def __init__(self, name="hub", capacity=MAX_STNS):
        self.name = name
        self.registry = StationRegistry(capacity, name)
        self.pool = ListenerPool(self.registry)
        self.logger = setup_logger(f"Hub_{name}", f"hub_{name}")

    def add_station(self, transmit, receive, name=None):
        """Register a station's channel pair; returns its index."""
        return self.registry.register(transmit, receive, name)

    @property
    def is_full(self):
        return self.registry.is_full

    def start(self):
        self.logger.info(f"Hub {self.name} relaying for {len(self.registry)} station(s)")
        self.pool.start()

    def run(self, duration):
        """Relay for duration seconds, then shut down."""
        self.start()
        self.pool.run_for(duration)
        self.shutdown()

    def shutdown(self, timeout=LISTENER_JOIN_TIMEOUT):
        """
        Stop relaying and close every hub-side endpoint; stations see end-of-stream.

        An endpoint still in use by a listener that did not stop in time is
        left open: closing it under a pending read or write could hand its
        descriptor number to an unrelated file.
        """
        if not self.pool.stop_event.is_set():
            self.pool.stop(timeout)
        for station in self.registry:
            if station.receive_lock.acquire(timeout=timeout):
                try:
                    station.receive.close()
                finally:
                    station.receive_lock.release()
            else:
                self.logger.warning(f"Relay to {station} still in progress, leaving {station.receive} open")

            if self.pool.is_listening(station.index):
                self.logger.warning(f"Listener for {station} still running, leaving {station.transmit} open")
            else:
                station.transmit.close()
        self.logger.info(f"Hub {self.name} shut down")

    def __str__(self):
        return f"Hub({self.name}, {len(self.registry)} stations)"
