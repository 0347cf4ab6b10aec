"""League fixture scheduling and standings backend."""
