"""Core: pure domain logic (no IO, no framework imports).

Invariants:
    - Core NEVER imports from db/, models/, services/, infrastructure/ or api/
    - Functions here are deterministic given their inputs (randomness only in
      report_crypto and auth_tokens, where nonces and tokens require it)
"""
