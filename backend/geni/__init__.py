"""Geni Application Package: DNA file parsing, trait insights, encrypted reports.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
