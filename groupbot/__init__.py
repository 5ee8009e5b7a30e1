"""Building blocks for a group chat bot: reminder timers, MIDI tools, game registries and web lookups."""

__version__ = "0.1.0"