"""Per-segment email rendering for newsletter posts."""
