"""
Pocket Ledger - Source Package

A personal and shared finance tracker: wallets, income/expense/savings
transactions, collective savings goals and spending analytics.

DESIGN PRINCIPLES:
1. One store owns all state
2. Wallet balances always match their transactions
3. Rejections are reported, never silently fixed
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
