"""
PrunePro Content Retirement Engine

A 4-phase pipeline deciding what to do with every URL of a site:
- Phase 1: Zombie score (traffic, rank, engagement, freshness, value signals + guards)
- Phase 2: Near-duplicate clustering and canonical selection
- Phase 3: Action decision (keep, refresh, consolidate, redirect, prune)
- Phase 4: What-if simulation and rollback plan

All phases are pure: nothing is fetched, stored or applied.
"""

from .pipeline import run_analysis

__version__ = '1.0.0'
__all__ = ['run_analysis']
