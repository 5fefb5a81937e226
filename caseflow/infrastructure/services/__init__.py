"""Infrastructure services: outbound adapters."""
