from src.services import user_service


__all__ = [
    "user_service",
]
