"""Pricing app package.

Nightly price calculation and the booking quote built on top of it.
"""
