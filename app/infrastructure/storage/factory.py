"""
Lead Store Factory
"""
from typing import Dict, Type
from app.domain.interfaces.lead_store import LeadStore


class LeadStoreFactory:
    """Factory for creating lead store backends"""

    _backends: Dict[str, Type[LeadStore]] = {}

    @classmethod
    def create(cls, backend: str, **kwargs) -> LeadStore:
        """Create lead store instance"""
        if backend not in cls._backends:
            available = ", ".join(cls._backends.keys()) if cls._backends else "None"
            raise ValueError(f"Unknown lead store backend: {backend}. Available: {available}")

        store_class = cls._backends[backend]
        return store_class(**kwargs)

    @classmethod
    def register(cls, name: str, store_class: Type[LeadStore]) -> None:
        """Register a backend"""
        cls._backends[name] = store_class

    @classmethod
    def list_backends(cls) -> list[str]:
        """List available backends"""
        return list(cls._backends.keys())


from app.infrastructure.storage.memory_store import InMemoryLeadStore
from app.infrastructure.storage.supabase_store import SupabaseLeadStore

LeadStoreFactory.register("memory", InMemoryLeadStore)
LeadStoreFactory.register("supabase", SupabaseLeadStore)
