"""Domain entities."""
from .execution import Execution

__all__ = ["Execution"]
