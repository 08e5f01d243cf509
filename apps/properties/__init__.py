"""Properties app package.

Campgrounds, their bookable sites and the per-date availability calendar
that every booking claims nights from.
"""
