"""Public HTTP API: verify and report routers, error envelope, middleware."""
