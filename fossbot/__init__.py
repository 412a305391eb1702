"""fossbot: an IRC bot for the FOSS community channels."""

__version__ = "1.0.0"
