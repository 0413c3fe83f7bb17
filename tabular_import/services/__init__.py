"""Import / export services built on the tabular pipeline."""
