"""Infrastructure layer: file discovery and I/O."""
