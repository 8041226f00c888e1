"""Step 02: Frame capture."""
