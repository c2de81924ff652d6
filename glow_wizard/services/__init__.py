from .openai_service import recommendation_service

__all__ = [
    "recommendation_service"
]
