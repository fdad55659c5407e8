"""
Shop Balance Service

Shop balances are owned by database functions reached through the Supabase
client's RPC interface:

- calculate_shop_balance(shop_id_param): current balance
- update_shop_balance(shop_id_param): recompute and store one shop's balance
- recalculate_all_shop_balances(): recompute every shop
- add_shop_transaction(shop_id_param, type_param, amount_param, description_param)
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from supabase import Client

from marketdesk.core.database import get_supabase
from marketdesk.services.metrics import to_float

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTIONS = {
    "recharge": "Recharge transaction",
    "withdraw": "Withdraw transaction",
}
PAYOUT_DESCRIPTION = "Complete balance payout"


class BalanceService:
    """
    Wraps the shop balance RPC functions

    Args:
        client: Supabase client (defaults to the shared service-role client)
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def _rpc(self, name: str, params: Optional[dict] = None) -> Any:
        try:
            response = self.client.rpc(name, params or {}).execute()
        except Exception as e:
            logger.error(f"RPC {name} failed: {e}")
            raise
        return response.data

    def get_balance(self, shop_id: int) -> float:
        """Current balance of a shop"""
        return to_float(self._rpc("calculate_shop_balance", {"shop_id_param": shop_id}))

    def recalculate(self, shop_id: int) -> float:
        """Recompute and store the balance of one shop; returns the new balance"""
        balance = to_float(self._rpc("update_shop_balance", {"shop_id_param": shop_id}))
        logger.info(f"Recalculated balance of shop {shop_id}: {balance:.2f}")
        return balance

    def recalculate_all(self) -> None:
        self._rpc("recalculate_all_shop_balances")
        logger.info("Recalculated all shop balances")

    def add_transaction(
        self,
        shop_id: int,
        type: str,
        amount: Any,
        description: Optional[str] = None
    ) -> Any:
        """
        Record a recharge or withdrawal

        Raises:
            ValueError: unknown type, amount not > 0, or a withdrawal larger
                than the current balance
        """
        if type not in DEFAULT_DESCRIPTIONS:
            raise ValueError(f"Invalid transaction type: {type}")

        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError, TypeError):
            raise ValueError("Please enter a valid amount")
        if not value.is_finite() or value <= 0:
            raise ValueError("Please enter a valid amount")

        if type == "withdraw":
            balance = self.get_balance(shop_id)
            if float(value) > balance:
                raise ValueError("Insufficient balance")

        description = (description or "").strip() or DEFAULT_DESCRIPTIONS[type]

        result = self._rpc("add_shop_transaction", {
            "shop_id_param": shop_id,
            "type_param": type,
            "amount_param": float(value),
            "description_param": description,
        })
        logger.info(f"Shop {shop_id}: {type} of {float(value):.2f} recorded")
        return result

    def payout_all(self, shop_id: int) -> Any:
        """Withdraw the whole current balance"""
        balance = self.get_balance(shop_id)
        if balance <= 0:
            raise ValueError("Nothing to pay out")
        return self.add_transaction(shop_id, "withdraw", balance, PAYOUT_DESCRIPTION)
