"""Vote counting and reward allocation for Snapshot gauge votes."""

__version__ = "0.1.0"
