"""
Production Python kernels.

These modules are designed to be:
- deterministic (integer-only, fixed-width checked),
- easy to audit (explicit intermediate variables),
- small surface-area (pure functions, no record access).
"""
