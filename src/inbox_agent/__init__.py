"""Inbox automation agent for the "Why Small Businesses Matter" campaign."""

__version__ = "0.1.0"
