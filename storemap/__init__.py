"""StoreMap Analytics — store network and product pricing dashboard backend."""

__version__ = "1.0.0"
