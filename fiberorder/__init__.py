"""Fiber ordering backend: promotions, pricing, promo codes, rate limiting, site gate."""
__version__ = "0.1.0"
