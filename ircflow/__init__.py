"""ircflow: IRC line decoding, message taxonomy and async session state machine."""

__version__ = "0.1.0"
