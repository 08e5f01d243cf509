"""Bookings app package.

This app encapsulates the booking domain: the booking aggregate, its
lifecycle commands, the pricing engine and the conflict checks that keep
a site from being sold twice for the same night.
"""
