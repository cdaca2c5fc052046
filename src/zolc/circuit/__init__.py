"""Circuit-tree shapes consumed by the circuit emitter."""
