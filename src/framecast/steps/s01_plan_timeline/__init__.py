"""Step 01: Timeline planning."""
