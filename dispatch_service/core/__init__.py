"""Core building blocks shared across features (exceptions, settings, schemas)."""
