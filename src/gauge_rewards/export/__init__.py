"""Flat-file artifacts: vote weights, bounty input and JSON results."""
