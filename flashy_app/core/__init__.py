"""Core infrastructure shared by every Flashy module."""
