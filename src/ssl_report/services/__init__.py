"""Assessment, normalization, rendering and report services."""
