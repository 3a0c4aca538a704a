"""
Result records produced by the analytics core.

Immutable snapshots handed back to the orchestration layer, which may
persist them. Nothing in the core mutates a record after creating it.
"""
