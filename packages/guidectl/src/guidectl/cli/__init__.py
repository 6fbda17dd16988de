"""Command-line surface for guidectl."""
