"""Game domain services: catalog, round rules, sessions, history and demo.

This package contains the game mechanics that HTTP routes call into,
keeping transport concerns separated from the core rules. Import the
submodules directly; this package does not re-export them.
"""
