"""
Unit tests for BalanceService

The Supabase client is a MagicMock; each RPC call returns a response whose
`.data` is configured per test.
"""
import pytest
from unittest.mock import MagicMock, call

from marketdesk.services.balance_service import BalanceService


def rpc_client(*results):
    """Client whose successive rpc(...).execute() calls return `results` as data"""
    client = MagicMock()
    client.rpc.return_value.execute.side_effect = [MagicMock(data=r) for r in results]
    return client


class TestBalanceService:

    def test_get_balance(self):
        client = rpc_client("250.75")
        service = BalanceService(client=client)

        assert service.get_balance(3) == 250.75
        client.rpc.assert_called_once_with("calculate_shop_balance", {"shop_id_param": 3})

    def test_recalculate_one_and_all(self):
        client = rpc_client(90, None)
        service = BalanceService(client=client)

        assert service.recalculate(3) == 90.0
        service.recalculate_all()

        assert client.rpc.call_args_list == [
            call("update_shop_balance", {"shop_id_param": 3}),
            call("recalculate_all_shop_balances", {}),
        ]

    def test_recharge_uses_default_description(self):
        client = rpc_client({"id": 1})
        service = BalanceService(client=client)

        service.add_transaction(3, "recharge", "40")

        client.rpc.assert_called_once_with("add_shop_transaction", {
            "shop_id_param": 3,
            "type_param": "recharge",
            "amount_param": 40.0,
            "description_param": "Recharge transaction",
        })

    @pytest.mark.parametrize("amount", [0, -5, "abc", None, "nan"])
    def test_invalid_amount_is_rejected(self, amount):
        client = rpc_client()
        service = BalanceService(client=client)

        with pytest.raises(ValueError, match="valid amount"):
            service.add_transaction(3, "recharge", amount)
        client.rpc.assert_not_called()

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValueError):
            BalanceService(client=rpc_client()).add_transaction(3, "refund", 10)

    def test_withdraw_cannot_exceed_balance(self):
        client = rpc_client(30)
        service = BalanceService(client=client)

        with pytest.raises(ValueError, match="Insufficient balance"):
            service.add_transaction(3, "withdraw", 30.01)
        # only the balance lookup was made
        assert client.rpc.call_count == 1

    def test_withdraw_within_balance(self):
        client = rpc_client(30, {"id": 2})
        service = BalanceService(client=client)

        service.add_transaction(3, "withdraw", 30, "Weekly payout")

        client.rpc.assert_called_with("add_shop_transaction", {
            "shop_id_param": 3,
            "type_param": "withdraw",
            "amount_param": 30.0,
            "description_param": "Weekly payout",
        })

    def test_payout_all_withdraws_whole_balance(self):
        # payout balance lookup, withdraw balance check, the transaction itself
        client = rpc_client(55.5, 55.5, {"id": 3})
        service = BalanceService(client=client)

        service.payout_all(3)

        client.rpc.assert_called_with("add_shop_transaction", {
            "shop_id_param": 3,
            "type_param": "withdraw",
            "amount_param": 55.5,
            "description_param": "Complete balance payout",
        })

    def test_payout_with_empty_balance(self):
        with pytest.raises(ValueError):
            BalanceService(client=rpc_client(0)).payout_all(3)
