"""
Lint Rules.

Modules:
    - ``parallel_assignment``: ``Style/ParallelAssignment``.
"""
