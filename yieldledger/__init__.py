"""
yieldledger: a pooled share vault and a time-locked staking ledger.
"""

__version__ = "0.1.0"
