"""
Entity module for the Skirmish combat core.

This module holds the data the fights are made of: mob templates and
instances, stat snapshots, vitals, and the static camp, loot and class
definitions.
"""
