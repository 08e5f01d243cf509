"""Finances app package.

Payment provider integration for bookings: checkout link issuance after a
booking is created, callback reconciliation and the transaction audit log.
"""
