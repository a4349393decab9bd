"""
Pocket Ledger - Account Lifecycle Backend

Server-side account lifecycle for the Pocket Ledger budget tracker.
The client owns all budget and transaction content; this package only
removes it (on request or after inactivity) or timestamps it.

DESIGN PRINCIPLES:
1. A caller can only ever delete their own account
2. No user is left half-deleted
3. The scheduled sweep never crashes its trigger
4. Every lifecycle step is logged with the affected user ID
5. Storage and identity backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
