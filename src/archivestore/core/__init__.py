"""Core infrastructure: integrity hashing, configuration, logging, local files."""
