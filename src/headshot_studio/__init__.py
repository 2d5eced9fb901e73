"""AI headshot studio: upload a selfie, pick a style, get a professional headshot."""

__version__ = "0.1.0"
