"""
Combat system module for the Skirmish combat core.

This module handles hit resolution, resists and mitigation, damage
application, and the encounter lifecycle of the active mob.
"""
