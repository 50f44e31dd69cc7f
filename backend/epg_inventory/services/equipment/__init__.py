"""Equipment-instance write path."""
