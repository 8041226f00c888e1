"""Step 03: Video encoding."""
