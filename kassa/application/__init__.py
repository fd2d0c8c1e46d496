"""Chat-facing workflows built on the pure receipt parser and runtime services."""
