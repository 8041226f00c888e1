"""Pipeline steps: plan timeline, capture frames, encode video."""
