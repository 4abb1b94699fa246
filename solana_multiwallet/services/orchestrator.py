"""
Batch orchestrator.

Facade over the capacity validator, fan-out allocator, adapter registry,
balance snapshot provider and sequential executor. Every ``run_*`` method
resolves its adapter and capacity ceiling first, so configuration errors
surface before anything is validated or executed. Everything after that
ends in a BatchReport.
"""

from typing import Hashable, List, Mapping, Optional, Sequence, Tuple

from solana_multiwallet.allocation import allocate, plan_fan_out
from solana_multiwallet.capacity import (
    CAPACITY_TABLE,
    CapacityCheck,
    check_capacity_coverage,
    get_active_wallets,
    validate_capacity,
)
from solana_multiwallet.clients.relay_client import JitoBundleRelay, RpcRelay
from solana_multiwallet.clients.rpc_client import SolanaRpcClient
from solana_multiwallet.clients.trading_client import TradingServerClient
from solana_multiwallet.config import AppConfig, get_app_config
from solana_multiwallet.models.operations import (
    BatchReport,
    Direction,
    OperationKind,
    OperationResult,
    SellerConfig,
)
from solana_multiwallet.models.params import (
    BundleParams,
    BurnParams,
    ConsolidateParams,
    CustomBuyParams,
    DeployParams,
    DistributeParams,
    FanOutParams,
    TokenMetadata,
    TradeParams,
    TransferParams,
)
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import AdapterContext, ProtocolAdapter
from solana_multiwallet.services.adapters.registry import AdapterRegistry
from solana_multiwallet.services.balance_service import BalanceService
from solana_multiwallet.services.base_service import BaseService
from solana_multiwallet.services.executor import SequentialExecutor, WorkUnit
from solana_multiwallet.utils.errors import OrchestratorError


class BatchOrchestrator(BaseService):
    """Entry point for capacity checks, fan-out allocation and batch runs."""

    def __init__(
        self,
        registry: AdapterRegistry,
        balance_service: BalanceService,
        executor: SequentialExecutor,
        capacity_table: Mapping[OperationKind, int] = CAPACITY_TABLE,
        default_slippage_bps: Optional[int] = None,
        closeables: Sequence = ()
    ):
        super().__init__()
        self.registry = registry
        self.balance_service = balance_service
        self.executor = executor
        self.capacity_table = capacity_table
        self.default_slippage_bps = (
            registry.context.settings.default_slippage_bps
            if default_slippage_bps is None else default_slippage_bps
        )
        self._closeables = list(closeables)

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "BatchOrchestrator":
        """Wire every collaborator from configuration."""
        config = config or get_app_config()
        trading_client = TradingServerClient(config.trading_server)
        rpc_client = SolanaRpcClient(config.solana)
        jito_relay = JitoBundleRelay(config.relay)
        context = AdapterContext(
            trading_client=trading_client,
            jito_relay=jito_relay,
            rpc_relay=RpcRelay(rpc_client),
            settings=config.executor,
        )
        return cls(
            registry=AdapterRegistry(context),
            balance_service=BalanceService(
                rpc_client,
                concurrency=config.executor.balance_concurrency,
                cache_ttl=config.executor.balance_cache_ttl,
            ),
            executor=SequentialExecutor(config.executor.inter_unit_delay),
            closeables=(trading_client, rpc_client, jito_relay),
        )

    async def close(self) -> None:
        for closeable in self._closeables:
            await closeable.close()

    async def __aenter__(self) -> "BatchOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Pure helpers

    def validate_capacity(self, wallets: Sequence[WalletHandle], kind: OperationKind) -> CapacityCheck:
        """Check the active wallet count against the ceiling for ``kind``."""
        return validate_capacity(wallets, kind, self.capacity_table)

    def allocate(self, sell_percentage: float, buyer_count: int) -> float:
        """Equal per-buyer share of a seller's released percentage."""
        return allocate(sell_percentage, buyer_count)

    # Setup

    def _prepare(self, kind: OperationKind) -> ProtocolAdapter:
        """Resolve the adapter and make sure the kind has a ceiling.

        Raises:
            ConfigurationError: Before any unit is touched
        """
        adapter = self.registry.resolve(kind)
        check_capacity_coverage([kind], self.capacity_table)
        return adapter

    async def _run(
        self,
        kind: OperationKind,
        units: List[WorkUnit],
        participants: Sequence[WalletHandle],
        group_extra: Hashable = None
    ) -> BatchReport:
        gate = self.validate_capacity(participants, kind)
        if not gate.ok:
            self.logger.warning(gate.message)
        group = (kind, group_extra, tuple(unit.label for unit in units))
        report = await self.executor.run(units, group=group, gate=gate)
        if report.success_count:
            self.balance_service.invalidate()
        return report

    @staticmethod
    def _single_failure(label: str, error: str) -> BatchReport:
        report = BatchReport()
        report.record(label, OperationResult.failed(error), stage="preflight")
        return report

    # Batches

    async def run_trade(
        self,
        wallets: Sequence[WalletHandle],
        protocol,
        direction,
        token_address: str,
        amount: float,
        slippage_bps: Optional[int] = None
    ) -> BatchReport:
        """Buy (SOL per wallet) or sell (percentage) across every active wallet.

        Raises:
            ConfigurationError: Unknown protocol or direction
        """
        kind = OperationKind.for_trade(protocol, direction)
        adapter = self._prepare(kind)
        active = get_active_wallets(wallets)
        direction = Direction(direction)
        balances = await self.balance_service.refresh(
            active,
            token_address if direction is Direction.SELL else None
        )
        params = TradeParams(
            token_address=token_address,
            amount=amount,
            slippage_bps=self.default_slippage_bps if slippage_bps is None else slippage_bps,
        )
        unit = WorkUnit(
            label=f"{kind.value} x{len(active)}",
            adapter=adapter,
            wallets=tuple(active),
            params=params,
            balances=balances,
        )
        return await self._run(kind, [unit], wallets, token_address)

    async def run_fan_out(self, sellers: Sequence[SellerConfig], token_address: str) -> BatchReport:
        """Sell from each seller into its buyers, one seller/buyer pair per unit."""
        kind = OperationKind.FAN_OUT
        adapter = self._prepare(kind)
        legs = plan_fan_out(sellers)

        seller_wallets = list({seller.wallet.address: seller.wallet for seller in sellers}.values())
        balances = await self.balance_service.refresh(seller_wallets, token_address)

        units = []
        for leg in legs:
            wallets = (leg.seller,) if leg.buyer is None else (leg.seller, leg.buyer)
            units.append(WorkUnit(
                label=leg.label,
                adapter=adapter,
                wallets=wallets,
                params=FanOutParams(
                    token_address=token_address,
                    seller_share=leg.seller_share,
                    buy_percentage=leg.buy_percentage,
                    seller_percentage=leg.seller_percentage,
                ),
                balances=balances,
            ))

        participants = list({w.address: w for unit in units for w in unit.wallets}.values())
        return await self._run(kind, units, participants, token_address)

    async def run_custom_buy(
        self,
        wallets: Sequence[WalletHandle],
        token_address: str,
        amounts: Mapping[str, float],
        use_rpc: bool = False
    ) -> BatchReport:
        """Buy with a distinct SOL amount per wallet.

        The builder is called once; each returned bundle becomes a unit. A
        rejected request or builder failure is reported as one failed unit.
        """
        kind = OperationKind.CUSTOM_BUY
        adapter = self._prepare(kind)
        active = get_active_wallets(wallets)
        gate = self.validate_capacity(active, kind)
        if not gate.ok:
            return self._single_failure("custom buy request", gate.message)

        balances = await self.balance_service.refresh(active)
        request = CustomBuyParams(token_address=token_address, amounts=dict(amounts), use_rpc=use_rpc)
        error = adapter.check_request(active, request, balances)
        if error:
            return self._single_failure("custom buy request", error)

        try:
            bundles = await adapter.request_bundles(active, request)
        except OrchestratorError as e:
            self.logger.error(f"Custom buy builder request failed: {e.message}")
            return self._single_failure("custom buy request", e.message)

        units = [
            WorkUnit(
                label=f"bundle {position}/{len(bundles)}",
                adapter=adapter,
                wallets=tuple(active),
                params=BundleParams(bundle=bundle, use_rpc=use_rpc),
                balances=balances,
            )
            for position, bundle in enumerate(bundles, start=1)
        ]
        return await self._run(kind, units, active, token_address)

    async def run_transfers(
        self,
        sources: Sequence[WalletHandle],
        receiver: str,
        amount: float,
        token_address: Optional[str] = None
    ) -> BatchReport:
        """Send ``amount`` of SOL (or a token) from each active source wallet."""
        kind = OperationKind.TRANSFER
        adapter = self._prepare(kind)
        active = get_active_wallets(sources)
        balances = await self.balance_service.refresh(active, token_address)
        params = TransferParams(receiver=receiver, amount=amount, token_address=token_address)
        units = [
            WorkUnit(
                label=f"transfer {wallet.short_address}",
                adapter=adapter,
                wallets=(wallet,),
                params=params,
                balances=balances,
            )
            for wallet in active
        ]
        return await self._run(kind, units, active, (receiver, token_address))

    async def run_burn(self, wallet: WalletHandle, token_address: str, amount: float) -> BatchReport:
        kind = OperationKind.BURN
        adapter = self._prepare(kind)
        balances = await self.balance_service.refresh([wallet], token_address)
        unit = WorkUnit(
            label=f"burn {wallet.short_address}",
            adapter=adapter,
            wallets=(wallet,),
            params=BurnParams(token_address=token_address, amount=amount),
            balances=balances,
        )
        return await self._run(kind, [unit], [wallet], token_address)

    async def run_distribute(
        self,
        sender: WalletHandle,
        recipients: Sequence[Tuple[WalletHandle, float]],
    ) -> BatchReport:
        """Pay each recipient its SOL amount from ``sender`` in one unit."""
        kind = OperationKind.DISTRIBUTE
        adapter = self._prepare(kind)
        balances = await self.balance_service.refresh([sender])
        amounts = {wallet.address: amount for wallet, amount in recipients}
        unit = WorkUnit(
            label=f"distribute {sender.short_address} -> {len(amounts)} wallet(s)",
            adapter=adapter,
            wallets=(sender,) + tuple(wallet for wallet, _ in recipients),
            params=DistributeParams(amounts=amounts),
            balances=balances,
        )
        participants = [sender] + [wallet for wallet, _ in recipients]
        return await self._run(kind, [unit], participants)

    async def run_consolidate(
        self,
        sources: Sequence[WalletHandle],
        receiver: str,
        percentage: float
    ) -> BatchReport:
        """Move ``percentage`` of each active source's SOL into ``receiver``."""
        kind = OperationKind.CONSOLIDATE
        adapter = self._prepare(kind)
        active = get_active_wallets(sources)
        balances = await self.balance_service.refresh(active)
        params = ConsolidateParams(receiver=receiver, percentage=percentage)
        units = [
            WorkUnit(
                label=f"consolidate {wallet.short_address}",
                adapter=adapter,
                wallets=(wallet,),
                params=params,
                balances=balances,
            )
            for wallet in active
        ]
        return await self._run(kind, units, active, receiver)

    async def run_deploy(
        self,
        platform,
        wallets: Sequence[WalletHandle],
        metadata: TokenMetadata,
        amounts: Sequence[float],
        mint_address: Optional[str] = None,
        options: Optional[Mapping[str, object]] = None
    ) -> BatchReport:
        """Create a token; the first active wallet is the creator."""
        kind = OperationKind.for_deploy(platform)
        adapter = self._prepare(kind)
        active = get_active_wallets(wallets)
        balances = await self.balance_service.refresh(active)
        unit = WorkUnit(
            label=f"{kind.value} {metadata.symbol}",
            adapter=adapter,
            wallets=tuple(active),
            params=DeployParams(
                metadata=metadata,
                amounts=tuple(amounts),
                mint_address=mint_address,
                options=dict(options or {}),
            ),
            balances=balances,
        )
        return await self._run(kind, [unit], active, metadata.symbol)
