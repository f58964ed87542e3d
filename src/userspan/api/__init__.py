"""HTTP API: routers, path convertors and shared dependencies."""
