"""Counting, delegation resolution and reward reconciliation workflows."""
