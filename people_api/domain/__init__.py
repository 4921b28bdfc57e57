"""Domain types and rules that do not depend on the storage layer."""
