"""DetectSecure store access package.

Re-exports the public API:

    from detectsecure.store import StoreGate, create_store_gate

Layout:
    base.py  — StoreGateway: shared detector lookup + store error translation
    query.py — QueryGateway (anon key, read-only)
    admin.py — AdminGateway (service-role key, owner lookup + report insert)
    gate.py  — StoreGate + create_store_gate() — credential evaluation at startup
"""

from detectsecure.store.admin import AdminGateway
from detectsecure.store.base import StoreGateway
from detectsecure.store.gate import StoreGate, create_store_gate
from detectsecure.store.query import QueryGateway

__all__ = [
    "AdminGateway",
    "QueryGateway",
    "StoreGate",
    "StoreGateway",
    "create_store_gate",
]
