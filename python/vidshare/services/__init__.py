"""Business logic services.

This module contains service-layer functions that implement business logic.
Services are called by route handlers and orchestrate database operations.
Every function takes an explicit Session and, where access depends on it,
the acting viewer's id.
"""
