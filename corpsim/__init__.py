"""corpsim - financial statements and scarcity pricing for an hourly-turn economy."""

__version__ = "0.4.0"
