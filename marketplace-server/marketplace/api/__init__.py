"""HTTP API: routers, request dependencies and error translation."""
