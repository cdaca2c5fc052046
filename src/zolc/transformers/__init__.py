"""Passes over the parsed tree: checks, internal-call collection, reconciliation."""
