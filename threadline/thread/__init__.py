"""Thread reconstruction: ancestry walking, quote resolution, image collection."""
