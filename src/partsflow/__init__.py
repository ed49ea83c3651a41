"""PartsFlow Hub - inventory management for industrial components."""

__version__ = "1.0.0"
