"""
Sequential throttled executor.

A batch is a list of independent units of work. Every unit is validated
before the first one executes; units that fail validation are counted and
skipped. The rest run strictly one at a time in configured order, with a
fixed delay before every network call except the first. One unit's failure
or exception never stops its siblings.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, List, Optional, Sequence, Set, Tuple

from cachetools import LRUCache

from solana_multiwallet.capacity import CapacityCheck
from solana_multiwallet.models.balances import EMPTY_SNAPSHOT, BalanceSnapshot
from solana_multiwallet.models.operations import BatchReport, OperationResult
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.services.base_service import BaseService
from solana_multiwallet.utils.errors import BatchInProgressError


class BatchState(str, Enum):
    """Lifecycle of a batch group."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class WorkUnit:
    """One wallet-level operation: an adapter call with its inputs."""

    label: str
    adapter: ProtocolAdapter
    wallets: Tuple[WalletHandle, ...]
    params: Any
    balances: BalanceSnapshot = EMPTY_SNAPSHOT

    def __post_init__(self):
        object.__setattr__(self, "wallets", tuple(self.wallets))


class SequentialExecutor(BaseService):
    """Runs batches of work units one unit at a time."""

    def __init__(self, inter_unit_delay: float = 1.0, completed_history: int = 256):
        """
        Args:
            inter_unit_delay: Seconds to wait before each unit's network call
                after the first one; 0 disables the wait
            completed_history: How many finished groups still report COMPLETED
        """
        super().__init__()
        if inter_unit_delay < 0:
            raise ValueError("inter_unit_delay must not be negative")
        self.inter_unit_delay = inter_unit_delay
        self._running: Set[Hashable] = set()
        self._completed: LRUCache = LRUCache(maxsize=completed_history)

    def state(self, group: Hashable) -> BatchState:
        if group in self._running:
            return BatchState.RUNNING
        if group in self._completed:
            return BatchState.COMPLETED
        return BatchState.IDLE

    async def run(
        self,
        units: Sequence[WorkUnit],
        group: Optional[Hashable] = None,
        gate: Optional[CapacityCheck] = None
    ) -> BatchReport:
        """Run a batch to completion.

        Args:
            units: Units in execution order
            group: Logical group; a second batch of a running group is refused
            gate: Capacity check for the whole batch; when it failed every
                unit fails pre-flight with its message

        Returns:
            BatchReport with exactly one outcome per unit

        Raises:
            BatchInProgressError: If a batch of ``group`` is still running
        """
        if group is not None:
            if group in self._running:
                raise BatchInProgressError(group)
            self._running.add(group)
            self._completed.pop(group, None)

        report = BatchReport()
        try:
            async with self.log_timing(f"Batch of {len(units)} unit(s)"):
                runnable = await self._preflight(units, gate, report)
                await self._execute(runnable, report)
        finally:
            if group is not None:
                self._running.discard(group)
                self._completed[group] = True

        self.logger.info(report.summary())
        return report

    async def _preflight(
        self,
        units: Sequence[WorkUnit],
        gate: Optional[CapacityCheck],
        report: BatchReport
    ) -> List[WorkUnit]:
        runnable: List[WorkUnit] = []
        for unit in units:
            if gate is not None and not gate.ok:
                error = gate.message
            else:
                error = await self._validate(unit)
            if error is None:
                runnable.append(unit)
                continue
            self.logger.warning(f"Skipping {unit.label}: {error}")
            report.record(unit.label, OperationResult.failed(error), stage="preflight")
        return runnable

    async def _validate(self, unit: WorkUnit) -> Optional[str]:
        try:
            validation = await unit.adapter.validate(unit.wallets, unit.params, unit.balances)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.exception(f"Validation of {unit.label} raised: {e}")
            return f"Validation error: {str(e) or type(e).__name__}"
        if validation.valid:
            return None
        return validation.error or "Validation failed"

    async def _execute(self, units: Sequence[WorkUnit], report: BatchReport) -> None:
        for position, unit in enumerate(units):
            if position > 0 and self.inter_unit_delay > 0:
                await asyncio.sleep(self.inter_unit_delay)

            try:
                result = await unit.adapter.execute(unit.wallets, unit.params)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.exception(f"{unit.label} raised: {e}")
                report.record(
                    unit.label,
                    OperationResult.failed(str(e) or type(e).__name__),
                    stage="exception"
                )
                continue

            if not isinstance(result, OperationResult):
                self.logger.error(f"{unit.label} returned {type(result).__name__}, not OperationResult")
                result = OperationResult.failed("Adapter returned an invalid result")

            if result.success:
                self.logger.info(f"{unit.label} succeeded")
                for warning in result.warnings:
                    self.logger.warning(f"{unit.label}: {warning}")
            else:
                self.logger.warning(f"{unit.label} failed: {result.error}")
            report.record(unit.label, result)
