"""Cross-cutting infrastructure: configuration, logging, security."""
