"""
dropstats application package.

Serves medic drop statistics: global totals, leaderboards, per-player
ranks, player search and vanity url resolution.
"""

__version__ = "1.0.0"
