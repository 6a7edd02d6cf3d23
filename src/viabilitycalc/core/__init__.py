"""Domain core: catalog data, per-session selections and the score engine."""
