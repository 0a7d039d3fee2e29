"""Output writers: atomic file publication, call graph files and parquet facts."""
