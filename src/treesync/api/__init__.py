"""HTTP surface for the outline store."""
