"""Server core: event loop wiring and ticks."""
