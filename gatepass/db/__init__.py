"""Persistence layer for GatePass."""
