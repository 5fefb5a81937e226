"""Infrastructure: persistence, cache and outbound services."""
