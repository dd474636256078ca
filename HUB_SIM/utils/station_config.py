"""
Station configuration files for the Shared-Medium Hub Simulator.

Empty lines and lines starting with '#' are ignored.  The first character
of the first remaining line is the station identifier, the first character
of the second is the destination identifier; every other line is a message
to send, in order.

    # station A talks to B
    A
    B
    hello
    world
"""

from HUB_SIM.config import MSGS_MAX, ETX
from HUB_SIM.datalink.frame import is_station_id
from HUB_SIM.errors import StationConfigError
from HUB_SIM.utils.logging_config import setup_logger

logger = setup_logger("StationConfig")


class StationConfig:
    """Station identifier, destination identifier and the messages to send."""

    def __init__(self, station_id, destination_id, messages=(), source=None):
        self.station_id = station_id
        self.destination_id = destination_id
        self.messages = list(messages)
        self.source = source

    def __eq__(self, other):
        if not isinstance(other, StationConfig):
            return NotImplemented
        return (self.station_id, self.destination_id, self.messages) == \
            (other.station_id, other.destination_id, other.messages)

    def __repr__(self):
        return f"StationConfig({self.station_id!r}, {self.destination_id!r}, {self.messages!r})"


def parse_station_config(lines, source="<config>"):
    """Build a StationConfig from the lines of a configuration file."""
    station_id = None
    destination_id = None
    messages = []

    for line in lines:
        line = line.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue

        if station_id is None:
            station_id = line[0]
        elif destination_id is None:
            destination_id = line[0]
        elif ETX in line:
            logger.warning(f"{source}: message >{line}< contains {ETX!r}, ignored")
        elif len(messages) >= MSGS_MAX:
            logger.warning(f"{source}: more than {MSGS_MAX} messages, ignoring >{line}<")
        else:
            messages.append(line)

    if station_id is None or destination_id is None:
        raise StationConfigError(f"{source}: configuration corrupted (station and destination identifiers required)")
    for role, value in (("station", station_id), ("destination", destination_id)):
        if not is_station_id(value):
            raise StationConfigError(f"{source}: invalid {role} identifier {value!r}")

    return StationConfig(station_id, destination_id, messages, source)


def load_station_config(path):
    """Read and parse a configuration file."""
    try:
        with open(path, "r", encoding="utf-8") as config_file:
            lines = config_file.readlines()
    except OSError as e:
        raise StationConfigError(f"stn ({path}): {e.strerror or e}") from e
    return parse_station_config(lines, source=str(path))
