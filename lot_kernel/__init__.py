"""
Lot Kernel

Derives the state of gemstone lots from the memo log:
- Stage transitions parsed from memo process labels
- Weight conservation totals and yield per memo
- Current stage and cumulative totals per lot
- Per-stage production board
- Compare-and-set close/post/sell transitions with an append-only audit log
"""

__version__ = "0.1.0"
