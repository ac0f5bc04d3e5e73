"""Properties app package.

Listings as the pricing engine sees them: property types, the property
with its base nightly price, the extras catalog and weekday special prices.
"""
