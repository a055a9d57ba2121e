"""
Kernel layer.

`python/` holds the integer-only math kernels used by the pool engine: small,
pure functions with explicit rounding rules and typed results. They know
nothing about pools, parties or transfers and raise plain ValueError/TypeError.
"""
