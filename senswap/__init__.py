"""
SenSwap: multi-pool AMM state-transition engine.

Packages:
- `senswap.kernels`: checked fixed-width arithmetic and the cross-pool curve
- `senswap.state`: records, the account store, snapshots and the state root
- `senswap.core`: fee splitting, LP share math and the operation engine (`core.amm`)
- `senswap.integration`: token program and authorization gate
"""
