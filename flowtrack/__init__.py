"""
FlowTrack - Source Package

A personal inventory and cash-flow log that lives entirely on the
user's device.

DESIGN PRINCIPLES:
1. One flat list of transactions, newest first
2. Reject incomplete entries before they reach the ledger
3. No silent corrections
4. Every mutation rewrites the whole persisted list
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FlowTrack Team"
