"""New Relic alert light — webhook-driven status lights on Raspberry Pi GPIO."""

__version__ = "1.1.0"
