"""Setoran backend: hafalan submissions, quiz points and juz achievements."""

__version__ = "0.1.0"
