"""Repository interfaces, SQL implementations and in-memory fakes."""
