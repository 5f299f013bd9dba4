"""
Core types, generation workflow, controller and saved-trip store.
"""
