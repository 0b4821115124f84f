"""Core domain logic: configuration, authorization and the removal workflow."""
