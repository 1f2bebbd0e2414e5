"""HostPanel — token-gated host telemetry API."""

__version__ = "0.4.0"
