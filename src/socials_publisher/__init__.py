"""Publish images, reels, stories and carousels to Instagram through the Graph API."""

__version__ = "0.1.0"
