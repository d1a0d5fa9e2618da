"""Background pass description and synthesis."""
