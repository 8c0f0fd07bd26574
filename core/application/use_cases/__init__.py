"""Application use cases."""
from .notify_rundeck import NotifyRundeckUseCase

__all__ = ["NotifyRundeckUseCase"]
