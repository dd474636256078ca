"""
Byte-channel endpoints for the Shared-Medium Hub Simulator.

Each station is joined to the hub by two one-way channels:

    transmission:  station outbound  -->  hub transmit endpoint (hub reads)
    reception:     hub receive endpoint  -->  station inbound (station reads)

The names follow the station's point of view, so the hub reads from the
"transmit" endpoint and writes to the "receive" endpoint.
"""

import os
import select

from HUB_SIM.errors import TransportFault


class Endpoint:
    """One end of a one-way byte channel, backed by a file descriptor."""

    def __init__(self, fd, name, owner=None):
        self.fd = fd
        self.name = name
        self._owner = owner  # file object to close instead of the raw fd
        self.closed = False

    @classmethod
    def from_file(cls, file_obj, name):
        """Wrap a file object such as a subprocess pipe."""
        return cls(file_obj.fileno(), name, owner=file_obj)

    def read(self, size):
        """Blocking read; returns b"" at end-of-stream."""
        if self.closed:
            raise TransportFault(self.name, "read", "endpoint closed")
        try:
            return os.read(self.fd, size)
        except OSError as e:
            raise TransportFault(self.name, "read", e) from e

    def write(self, data):
        """Write all of data, retrying short writes."""
        if self.closed:
            raise TransportFault(self.name, "write", "endpoint closed")
        view = memoryview(data)
        try:
            while view:
                written = os.write(self.fd, view)
                view = view[written:]
        except OSError as e:
            raise TransportFault(self.name, "write", e) from e

    def wait_readable(self, timeout):
        """Return True when a read would not block (data or end-of-stream)."""
        if self.closed:
            raise TransportFault(self.name, "select", "endpoint closed")
        try:
            readable, _, _ = select.select([self.fd], [], [], timeout)
        except (OSError, ValueError) as e:
            raise TransportFault(self.name, "select", e) from e
        return bool(readable)

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            if self._owner is not None:
                self._owner.close()
            else:
                os.close(self.fd)
        except OSError:
            # The other side may already be gone; the descriptor is released either way
            pass

    def __str__(self):
        return f"Endpoint({self.name}, fd={self.fd})"


class StationLink:
    """The four endpoints joining one station to the hub."""

    def __init__(self, name, hub_transmit, hub_receive, station_outbound, station_inbound):
        self.name = name
        self.hub_transmit = hub_transmit  # hub reads what the station sent
        self.hub_receive = hub_receive  # hub writes what the station should receive
        self.station_outbound = station_outbound
        self.station_inbound = station_inbound

    def close_hub_side(self):
        self.hub_transmit.close()
        self.hub_receive.close()

    def close_station_side(self):
        self.station_outbound.close()
        self.station_inbound.close()

    def __str__(self):
        return f"StationLink({self.name})"


def create_station_link(name):
    """Create the transmission and reception pipes for one station."""
    tran_read, tran_write = os.pipe()
    rec_read, rec_write = os.pipe()
    return StationLink(
        name,
        hub_transmit=Endpoint(tran_read, f"{name}/tran-hub"),
        hub_receive=Endpoint(rec_write, f"{name}/rec-hub"),
        station_outbound=Endpoint(tran_write, f"{name}/tran-stn"),
        station_inbound=Endpoint(rec_read, f"{name}/rec-stn"),
    )
