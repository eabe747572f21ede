"""KTON Adapter - staking pool reads, balances and stake/unstake messages."""

from .adapter import KtonAdapter

__all__ = ["KtonAdapter"]
