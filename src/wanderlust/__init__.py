"""
WanderLust trip planner: parsing, rendering and saving of generated travel plans.
"""

__version__ = "0.1.0"
