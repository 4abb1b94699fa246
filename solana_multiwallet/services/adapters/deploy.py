"""
Token creation adapters.

The first participating wallet creates the token; every wallet, the
creator included, buys its own SOL amount in the same bundle. The mint
key is held by the trading server, which signs its slot before handing
the bundle over, so pre-signed slots are accepted here.
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Sequence

from solana_multiwallet.constants import DEPLOY_ENDPOINT, LAMPORTS_PER_SOL
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.operations import LaunchPlatform, OperationKind, OperationResult
from solana_multiwallet.models.params import DeployParams, TokenMetadata
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.utils.errors import OrchestratorError
from solana_multiwallet.utils.validation import is_positive_number, validate_public_key

DEFAULT_JITO_TIP_SOL = 0.0005


class DeployAdapter(ProtocolAdapter):
    """Common checks for every launch platform."""

    platform: LaunchPlatform
    accept_presigned = True

    @property
    def endpoint(self) -> str:
        return DEPLOY_ENDPOINT.format(platform=self.platform.value)

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: DeployParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        if not params.metadata.name.strip() or not params.metadata.symbol.strip():
            return "Token name and symbol are required"
        if len(params.amounts) != len(wallets):
            return f"Expected {len(wallets)} amounts, got {len(params.amounts)}"
        if params.mint_address is not None and not validate_public_key(params.mint_address):
            return f"Invalid mint address: {params.mint_address}"
        for wallet, amount in zip(wallets, params.amounts):
            if not is_positive_number(amount):
                return f"Invalid SOL amount for wallet {wallet.short_address}"
            if balances.sol_of(wallet.address) < amount:
                return f"Wallet {wallet.short_address} has insufficient SOL balance"
        return None

    @staticmethod
    def metadata_fields(metadata: TokenMetadata) -> Dict[str, Any]:
        return {
            "name": metadata.name,
            "symbol": metadata.symbol,
            "description": metadata.description,
            "telegram": metadata.telegram,
            "twitter": metadata.twitter,
            "website": metadata.website,
            "file": metadata.file,
        }


class PumpDeployAdapter(DeployAdapter):
    kind = OperationKind.DEPLOY_PUMP
    platform = LaunchPlatform.PUMP

    def build_payload(self, wallets: Sequence[WalletHandle], params: DeployParams) -> Dict[str, Any]:
        return {
            "walletAddresses": [wallet.address for wallet in wallets],
            "mintPubkey": params.mint_address,
            "config": {
                "tokenCreation": {
                    "metadata": self.metadata_fields(params.metadata),
                    "defaultSolAmount": params.amounts[0],
                }
            },
            "amounts": list(params.amounts),
        }

    async def execute(self, wallets: Sequence[WalletHandle], params: DeployParams) -> OperationResult:
        """Reserve a mint when none was given, then deploy.

        The mint address leads the references of a successful result.
        """
        if params.mint_address is None:
            try:
                mint = await self.context.trading_client.generate_mint()
            except OrchestratorError as e:
                return OperationResult.failed(f"Mint generation failed: {e.message}")
            self.logger.info(f"Generated mint {mint} for {params.metadata.symbol}")
            params = replace(params, mint_address=mint)

        result = await super().execute(wallets, params)
        if not result.success:
            return result
        return OperationResult.succeeded(
            references=(params.mint_address,) + result.references,
            warnings=result.warnings
        )


class BonkDeployAdapter(DeployAdapter):
    kind = OperationKind.DEPLOY_BONK
    platform = LaunchPlatform.BONK

    def build_payload(self, wallets: Sequence[WalletHandle], params: DeployParams) -> Dict[str, Any]:
        owner, buyers = wallets[0], wallets[1:]
        return {
            "tokenMetadata": self.metadata_fields(params.metadata),
            "ownerPublicKey": owner.address,
            "initialBuyAmount": params.amounts[0],
            "buyerWallets": [
                {"publicKey": wallet.address, "amount": int(round(amount * LAMPORTS_PER_SOL))}
                for wallet, amount in zip(buyers, params.amounts[1:])
            ],
        }


class BoopDeployAdapter(DeployAdapter):
    kind = OperationKind.DEPLOY_BOOP
    platform = LaunchPlatform.BOOP

    def build_payload(self, wallets: Sequence[WalletHandle], params: DeployParams) -> Dict[str, Any]:
        metadata = params.metadata
        links = [link for link in (metadata.website, metadata.twitter, metadata.telegram) if link]
        return {
            "walletAddresses": [wallet.address for wallet in wallets],
            "config": {
                "tokenCreation": {
                    "metadata": {
                        "name": metadata.name,
                        "symbol": metadata.symbol,
                        "description": metadata.description,
                        "imageUrl": metadata.file,
                        "links": links,
                        **({"totalSupply": params.options["totalSupply"]}
                           if "totalSupply" in params.options else {}),
                    },
                    "defaultSolAmount": params.amounts[0],
                },
                "jito": {
                    "tipAmount": params.options.get("jitoTip", DEFAULT_JITO_TIP_SOL),
                },
            },
            "amounts": list(params.amounts),
        }
