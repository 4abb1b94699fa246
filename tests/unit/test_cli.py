"""Unit tests for the command-line interface."""

import json
from unittest.mock import AsyncMock, patch

import base58
import pytest
from solders.keypair import Keypair

from solana_multiwallet.__main__ import WalletBook, main, run_plan
from solana_multiwallet.config import get_app_config, get_executor_config
from solana_multiwallet.models.operations import BatchReport, OperationResult
from solana_multiwallet.utils.errors import ValidationError


@pytest.fixture
def wallet_file(tmp_path):
    lines = [base58.b58encode(bytes(Keypair())).decode("ascii") for _ in range(6)]
    lines[-1] = "!" + lines[-1]
    path = tmp_path / "wallets.txt"
    path.write_text("# test keys\n" + "\n".join(lines) + "\n")
    return path


class TestCapacityCommand:
    """Test suite for the capacity command."""

    def test_within_ceiling(self, wallet_file, capsys):
        code = main(["capacity", "--kind", "deploy@pump", "--wallets", str(wallet_file)])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["active_count"] == 5
        assert output["message"] == "Valid: 5 active wallets (max 5)"

    def test_unknown_kind(self, wallet_file, capsys):
        code = main(["capacity", "--kind", "buy@orca", "--wallets", str(wallet_file)])

        error = json.loads(capsys.readouterr().err)
        assert code == 2
        assert error["success"] is False
        assert "buy@orca" in error["error"]["message"]

    def test_missing_wallet_file(self, tmp_path):
        assert main(["capacity", "--kind", "burn", "--wallets", str(tmp_path / "nope")]) == 2


class TestAllocateCommand:
    """Test suite for the allocate command."""

    def test_share(self, capsys):
        code = main(["allocate", "--percentage", "60", "--buyers", "3"])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["per_buyer_share"] == pytest.approx(20)

    @pytest.mark.parametrize("args", [
        ["--percentage", "60", "--buyers", "0"],
        ["--percentage", "0", "--buyers", "2"],
        ["--percentage", "150", "--buyers", "2"],
    ])
    def test_invalid_inputs(self, args):
        assert main(["allocate"] + args) == 2


class TestRunCommand:
    """Test suite for the run command."""

    def test_report_is_printed(self, wallet_file, tmp_path, capsys):
        plan = tmp_path / "plan.json"
        plan.write_text(json.dumps({"operation": "burn"}))
        report = BatchReport()
        report.record("w1", OperationResult.succeeded())
        report.record("w2", OperationResult.failed("Insufficient funds"))

        with patch("solana_multiwallet.__main__.run_plan", new=AsyncMock(return_value=report)) as mocked:
            code = main(["run", str(plan), "--wallets", str(wallet_file), "--delay", "0"])

        output = json.loads(capsys.readouterr().out)
        assert code == 1
        assert output["summary"] == "1 operations succeeded, 1 failed"
        assert output["errors"] == [{"unit": "w2", "error": "Insufficient funds"}]
        config = mocked.await_args.args[2]
        assert config.executor.inter_unit_delay == 0

    def test_delay_override_is_not_shared(self, wallet_file, tmp_path):
        plan = tmp_path / "plan.json"
        plan.write_text(json.dumps({"operation": "burn"}))
        default_delay = get_app_config().executor.inter_unit_delay
        override = default_delay + 7

        with patch("solana_multiwallet.__main__.run_plan", new=AsyncMock(return_value=BatchReport())) as mocked:
            main(["run", str(plan), "--wallets", str(wallet_file), "--delay", str(override)])

        assert mocked.await_args.args[2].executor.inter_unit_delay == override
        assert get_app_config().executor.inter_unit_delay == default_delay
        assert get_executor_config().inter_unit_delay == default_delay

    @pytest.mark.asyncio
    async def test_unknown_operation(self):
        with pytest.raises(ValidationError):
            await run_plan({"operation": "airdrop"}, [])


def test_wallet_book_lookup(wallet_factory):
    wallet = wallet_factory()
    book = WalletBook([wallet])

    assert book.get(wallet.address) is wallet
    with pytest.raises(ValidationError):
        book.get("unknown")
