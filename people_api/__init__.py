"""People data-access layer: persons, their attributes and cached lookups."""
