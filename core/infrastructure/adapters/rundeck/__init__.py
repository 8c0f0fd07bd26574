"""RunDeck adapters.

Keep this package import-light: the aiohttp-backed client is imported
from its own module when needed.
"""
from .in_memory_client import InMemoryRundeckClient, make_execution
from .mapper import RundeckMapper

__all__ = ["InMemoryRundeckClient", "RundeckMapper", "make_execution"]
