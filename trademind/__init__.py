"""TradeMind - AI stock analysis client."""

__version__ = "1.0.0"
