"""Exchange rate HTTP API serving the ECB euro foreign exchange reference rates."""

__version__ = "1.0.0"
