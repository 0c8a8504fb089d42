"""Infrastructure layer: file access and third-party toolkit adapters."""
