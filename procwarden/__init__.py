"""procwarden: alarm-driven process restart daemon."""

__version__ = "0.1.0"
