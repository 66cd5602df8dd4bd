"""Core — models, configuration, engine, persistence."""
