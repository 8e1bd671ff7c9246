"""
SubTrackr - Subscription Ledger

Tracks recurring payments, shows what they cost per month and per year,
and flags renewals that are coming up.

DESIGN PRINCIPLES:
1. The ledger is the single source of truth
2. Totals are always recomputed, never cached
3. Saved data is never overwritten before it has been loaded
4. A rejected backup import changes nothing
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SubTrackr Team"
