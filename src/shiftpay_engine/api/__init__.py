"""FastAPI application for the shift pay engine."""
