"""Turn timer domain services: player store, active timer, persistence.

This package contains the timer state machine that HTTP routes, socket
handlers and the CLI call into, keeping transport concerns separated
from the timing rules.
"""
