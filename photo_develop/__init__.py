"""Non-destructive photo develop core: store, filter chain, viewport and histogram."""
