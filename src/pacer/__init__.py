"""PACER - Monthly quota pacing at a glance."""

__version__ = "0.1.0"
