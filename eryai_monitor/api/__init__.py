"""HTTP API — FastAPI app and routes."""
