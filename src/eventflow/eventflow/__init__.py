"""EventFlow attendance package.

Feature modules (events, attendance, sync, reports, users) with a thin Flask
controller layer over service and repository layers.
"""
