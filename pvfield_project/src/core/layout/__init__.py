"""Module packing and layout aggregation for field segments."""
