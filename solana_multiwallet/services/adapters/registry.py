"""
Protocol adapter registry.

A static table maps each OperationKind to a factory. Factories import
their adapter module on first use, so a run only loads the backends it
touches. Resolved adapters are cached per kind.
"""

import importlib
from typing import Callable, Dict, Iterable, Mapping, Optional

from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.models.operations import Direction, OperationKind, Protocol
from solana_multiwallet.services.adapters.base import AdapterContext, ProtocolAdapter
from solana_multiwallet.utils.errors import ConfigurationError

logger = get_logger(__name__)

AdapterFactory = Callable[[AdapterContext], ProtocolAdapter]

_ADAPTER_PACKAGE = "solana_multiwallet.services.adapters"


def lazy_adapter(module: str, class_name: str, *args) -> AdapterFactory:
    """Factory that imports ``module`` only when called."""
    def factory(context: AdapterContext) -> ProtocolAdapter:
        adapter_module = importlib.import_module(f"{_ADAPTER_PACKAGE}.{module}")
        adapter_class = getattr(adapter_module, class_name)
        return adapter_class(context, *args)
    factory.__qualname__ = f"lazy_adapter({module}.{class_name})"
    return factory


def _trade_factories() -> Dict[OperationKind, AdapterFactory]:
    factories = {}
    for protocol in Protocol:
        for direction in Direction:
            kind = OperationKind.for_trade(protocol, direction)
            if protocol is Protocol.JUPITER:
                factories[kind] = lazy_adapter("jupiter", "JupiterTradeAdapter", protocol, direction)
            else:
                factories[kind] = lazy_adapter("trade", "TradeAdapter", protocol, direction)
    return factories


DEFAULT_FACTORIES: Mapping[OperationKind, AdapterFactory] = {
    **_trade_factories(),
    OperationKind.FAN_OUT: lazy_adapter("fan_out", "FanOutAdapter"),
    OperationKind.CUSTOM_BUY: lazy_adapter("custom_buy", "CustomBuyAdapter"),
    OperationKind.TRANSFER: lazy_adapter("transfer", "TransferAdapter"),
    OperationKind.BURN: lazy_adapter("burn", "BurnAdapter"),
    OperationKind.DISTRIBUTE: lazy_adapter("distribute", "DistributeAdapter"),
    OperationKind.CONSOLIDATE: lazy_adapter("consolidate", "ConsolidateAdapter"),
    OperationKind.DEPLOY_PUMP: lazy_adapter("deploy", "PumpDeployAdapter"),
    OperationKind.DEPLOY_BONK: lazy_adapter("deploy", "BonkDeployAdapter"),
    OperationKind.DEPLOY_BOOP: lazy_adapter("deploy", "BoopDeployAdapter"),
}


class AdapterRegistry:
    """Resolves operation kinds to adapters."""

    def __init__(
        self,
        context: AdapterContext,
        factories: Optional[Mapping[OperationKind, AdapterFactory]] = None
    ):
        self.context = context
        self._factories: Mapping[OperationKind, AdapterFactory] = dict(
            DEFAULT_FACTORIES if factories is None else factories
        )
        self._adapters: Dict[OperationKind, ProtocolAdapter] = {}

    def kinds(self) -> Iterable[OperationKind]:
        return tuple(self._factories)

    def is_loaded(self, kind: OperationKind) -> bool:
        return kind in self._adapters

    def resolve(self, kind: OperationKind) -> ProtocolAdapter:
        """Adapter for ``kind``, built on first use.

        Raises:
            ConfigurationError: If no adapter is registered for the kind
        """
        adapter = self._adapters.get(kind)
        if adapter is not None:
            return adapter

        factory = self._factories.get(kind)
        if factory is None:
            raise ConfigurationError(
                f"No adapter registered for {getattr(kind, 'value', kind)}",
                details={"kind": str(getattr(kind, "value", kind))}
            )
        logger.debug(f"Loading adapter for {kind.value}")
        adapter = factory(self.context)
        self._adapters[kind] = adapter
        return adapter

    def resolve_trade(self, protocol, direction) -> ProtocolAdapter:
        """Adapter for a buy/sell; unknown protocols raise ConfigurationError."""
        return self.resolve(OperationKind.for_trade(protocol, direction))
