"""Training analysis and planning core."""
