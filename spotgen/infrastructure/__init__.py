"""Infrastructure layer: external service connectors and the command line."""
