"""Data model and helpers for container-based network lab topologies."""

__version__ = "0.1.0"