"""Infrastructure: database sessions, structured logging and third-party HTTP clients.

Invariants:
    - Everything here performs IO; nothing here is imported by core/
"""
