"""
Staking-pool accounting engine.

- `stakepool.core.staking`: pure, integer-only reward accrual and operation handlers
- `stakepool.state`: canonical encoding, persisted records, key-value stores
- `stakepool.integration`: configuration and the imperative-shell service
"""
