"""
Configuration settings for the Shared-Medium Hub Simulator.
"""

# Frame format: STX dest src '-' payload ETX
STX = '@'  # Start of the frame
ETX = '~'  # End of the frame
SEPARATOR = '-'  # Between the header and the payload
ACKNOWLEDGEMENT = "Ack"  # Payload prefix of an acknowledgement frame
DEST_POS = 1
SRC_POS = 2
MSG_POS = 4

# Hub
MAX_STNS = 10  # Maximum number of stations on one hub
HUB_RUN_TIME = 30.0  # Seconds the hub relays before shutting down
LISTENER_POLL_INTERVAL = 0.1  # Seconds between cancellation checks while idle
LISTENER_JOIN_TIMEOUT = 1.0  # Seconds to wait for each listener on stop

# Stations
MSGS_MAX = 10  # Maximum number of messages in a station configuration
READ_SIZE = 4096  # Bytes requested per read on any endpoint
FRAME_BUFFER_SIZE = 16384  # Capacity of a station's frame buffer
STATION_EXIT_TIMEOUT = 5.0  # Seconds to wait for station processes after shutdown

# Logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DIR = 'logs'
