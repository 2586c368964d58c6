"""Domain services for the Lydian Travel API.

Modules are imported directly (``lydian_travel.services.booking_service``); the
security dependencies import the email service, so nothing is re-exported here.
"""
