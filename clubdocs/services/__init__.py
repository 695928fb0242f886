"""Service layer for the managed document collections."""
