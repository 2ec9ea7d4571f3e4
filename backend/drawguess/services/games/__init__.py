"""Game domain services: words, scoring, timers and the session controller.

This package contains pure(ish) domain logic that is driven by socket
handlers and HTTP routes, keeping transport concerns separated from core
game mechanics.
"""
