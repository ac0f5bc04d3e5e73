"""Bookings app package.

Reservations of a property for a stay. Confirming a booking re-runs the
quote and freezes the result on the booking; later changes to prices,
promotions or commissions never touch stored bookings.
"""
