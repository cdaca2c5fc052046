"""zolc - semantic analysis and circuit reconciliation for zero-knowledge contracts.

Architecture:
    parsed tree -> Paths/Scopes (traverse) -> checks -> internal calls -> reconcile

Checks annotate the parsed tree in place. Reconciliation mutates the circuit
Folder handed to it in place.
"""
