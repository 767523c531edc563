"""
swap-yield-router: approve, swap through a Uniswap V3 pool, and deposit the
output into a lending venue and a vault venue on a test network.
"""

__version__ = "0.1.0"
