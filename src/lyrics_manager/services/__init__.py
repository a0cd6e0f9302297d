"""Services built on top of the catalog store: library, backup and item files."""
