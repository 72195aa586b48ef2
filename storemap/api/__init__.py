"""HTTP API: routers, dependencies, response models."""
