"""Let's Vent Together: complaint-to-completion proxy and terminal client."""

__version__ = "0.1.0"
