"""randpick: a categorised content library with filtered random picks."""

__version__ = "0.1.0"
