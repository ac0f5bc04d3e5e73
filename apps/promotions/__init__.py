"""Promotions app package.

Percentage discounts over a date range and the conflict manager that keeps
at most one active promotion on any night of a property.
"""
