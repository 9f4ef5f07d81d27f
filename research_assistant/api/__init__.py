"""HTTP API: FastAPI app, routes and error mapping."""
