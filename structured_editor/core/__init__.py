"""GUI-agnostic editor core: store, node kinds, paths and editing services."""
