"""
Skirmish combat core.

This package simulates real-time combat between one player character and one
mob: hit resolution, resists, runes and damage shields, timed effects, and the
experience, leveling and death consequences of every fight.
"""

__version__ = "0.1.0"
