"""Commissions app package.

Per property type commission overrides, the global fallback settings and
the cached resolver the pricing engine reads them through.
"""
