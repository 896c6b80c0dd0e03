"""Messaggio Azione - turns an Italian message into tasks, replies, an event and a next step."""

__version__ = "0.1.0"
