"""Clients for the Snapshot hub, the delegation subgraph and the score API."""
