"""Protocol adapters and their registry.

Adapter modules are imported lazily through the registry; only the shared
base types are exported here.
"""

from solana_multiwallet.services.adapters.base import AdapterContext, ProtocolAdapter
from solana_multiwallet.services.adapters.registry import AdapterRegistry, DEFAULT_FACTORIES

__all__ = ["AdapterContext", "AdapterRegistry", "DEFAULT_FACTORIES", "ProtocolAdapter"]
