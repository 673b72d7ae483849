"""HTTP service for world generation."""
