"""Catering Aja: catering storefront API, pricing rules and storefront client state."""

__version__ = "1.0.0"
