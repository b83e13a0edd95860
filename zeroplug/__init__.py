"""Chat-bot plugin toolkit: reminders, group administration, MIDI and lookup helpers."""

__version__ = "0.1.0"