"""Reference host implementations of the storage and inference capabilities."""
