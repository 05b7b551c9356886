"""pawfacts: a conversational agent that fetches dog images and cat facts."""

__version__ = "0.1.0"
