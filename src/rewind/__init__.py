"""Change Rewind -- find the changes that most plausibly caused an incident."""

__version__ = "0.1.0"
