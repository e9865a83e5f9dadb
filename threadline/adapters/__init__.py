"""Provider adapters for context bundles."""
