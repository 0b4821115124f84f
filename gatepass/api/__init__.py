"""HTTP API for GatePass."""
