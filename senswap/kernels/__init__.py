"""
Kernel layer.

This package groups the deterministic integer kernels used by the AMM core.
- `senswap/kernels/python/` contains the production Python kernels: checked
  fixed-width arithmetic and the cross-pool pricing curve.
"""
