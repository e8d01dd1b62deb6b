"""Service layer: engine wiring and FastAPI dependencies."""
