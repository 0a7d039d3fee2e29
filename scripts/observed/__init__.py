"""Runtime evidence: observed indirect-branch edges and the persistent edge store."""
