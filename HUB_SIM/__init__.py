"""
Shared-Medium Hub Simulator
Stations exchanging stop-and-wait frames through a broadcast hub.
"""

from .datalink.frame import Frame, FrameBuffer, encode_frame, decode_frame
from .datalink.station import StationAgent
from .physical.hub import Hub, ListenerPool
from .physical.registry import StationRegistry

__all__ = ['Frame', 'FrameBuffer', 'encode_frame', 'decode_frame',
           'StationAgent', 'Hub', 'ListenerPool', 'StationRegistry']
