"""factbot: a community-edited factoid chat bot."""

__version__ = "0.1.0"
