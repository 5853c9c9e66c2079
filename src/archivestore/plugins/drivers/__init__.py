"""Built-in storage drivers, discovered by folder scan."""
