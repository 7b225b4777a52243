from . import health, publish

__all__ = ["health", "publish"]
