"""Trade stream client over WebSockets, with a raw feed reader, a counter demo and compiler identification."""

__version__ = "0.1.0"