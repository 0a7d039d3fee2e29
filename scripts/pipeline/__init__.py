"""End-to-end reduction run wiring the codec, evidence index, engine and writers."""
