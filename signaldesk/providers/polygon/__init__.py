from .client import PolygonClient

__all__ = ["PolygonClient"]
