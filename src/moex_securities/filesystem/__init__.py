"""Small filesystem inspection helpers exposed on the CLI."""
