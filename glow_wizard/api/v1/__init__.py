from . import recommendations, profile

__all__ = ["recommendations", "profile"]
