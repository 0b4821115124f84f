"""Application services built on top of the removal workflow."""
