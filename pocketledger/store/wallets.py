"""Wallet Ledger: wallets and their cached running balances."""

from typing import Optional

import structlog

from pocketledger.models.ledger import Wallet, WalletType
from pocketledger.store.ids import IdFactory
from pocketledger.store.state import LedgerState
from pocketledger.validation import LedgerValidator, enforce


logger = structlog.get_logger(__name__)


class WalletLedger:
    """
    Owns the wallet collection.

    Balances only change through ``adjust_balance``, which the transaction
    ledger calls; wallets are never deleted.
    """

    def __init__(self, state: LedgerState, ids: IdFactory, validator: LedgerValidator):
        self._state = state
        self._ids = ids
        self._validator = validator

    def list_wallets(self) -> list[Wallet]:
        return list(self._state.wallets)

    def get(self, wallet_id: Optional[str]) -> Optional[Wallet]:
        for wallet in self._state.wallets:
            if wallet.id == wallet_id:
                return wallet
        return None

    def exists(self, wallet_id: Optional[str]) -> bool:
        return self.get(wallet_id) is not None

    def create_wallet(
        self,
        name: str,
        wallet_type: WalletType = WalletType.PERSONAL,
        members: Optional[list[str]] = None,
    ) -> Wallet:
        """
        Create a wallet with a zero balance.

        Raises:
            ValidationError: If the name is blank
        """
        wallet_type = WalletType(wallet_type)
        enforce(self._validator.check_wallet(name, wallet_type, members))

        named = [m.strip() for m in (members or []) if m and m.strip()]
        wallet = Wallet(
            id=self._ids.next_id(),
            name=name.strip(),
            type=wallet_type,
            members=named if wallet_type == WalletType.SHARED else None,
            balance=0.0,
        )
        self._state.wallets.append(wallet)
        logger.info("wallet_created", wallet_id=wallet.id, type=wallet.type.value)
        return wallet

    def adjust_balance(self, wallet_id: str, delta: float) -> bool:
        """Apply a signed delta. Unknown wallets are left alone."""
        for index, wallet in enumerate(self._state.wallets):
            if wallet.id == wallet_id:
                self._state.wallets[index] = wallet.model_copy(
                    update={"balance": wallet.balance + delta}
                )
                return True
        logger.debug("wallet_not_found", wallet_id=wallet_id, delta=delta)
        return False
