"""ExchangeClient error translation; no node needed."""

from types import SimpleNamespace

import pytest
from beaker.client import LogicException

from nft_exchange import INDIAN_TERMS, WORLD_TERMS, InvalidPayment, Unauthorized
from nft_exchange.client import ExchangeClient
from nft_exchange.terms import MUST_OWN_ITEM, PRICE_MUST_EQUAL_LISTING


class Rejected(LogicException):
    """A failed assert as algod reports it, without a program or source map."""

    def __init__(self, reason):
        Exception.__init__(self, reason)
        self.reason = reason

    def __str__(self):
        return (
            "Txn ABC had error 'assert failed pc=97' at PC 97 and Source Line 40: \n\n"
            f"\t    assert // {self.reason} <-- Error\n"
        )


def offline_client(terms):
    client = ExchangeClient.__new__(ExchangeClient)
    client.terms = terms
    client.app_client = SimpleNamespace(app_id=7)
    return client


@pytest.mark.parametrize(
    "terms, reason, error_cls",
    [
        (WORLD_TERMS, PRICE_MUST_EQUAL_LISTING, InvalidPayment),
        (WORLD_TERMS, MUST_OWN_ITEM, Unauthorized),
        (INDIAN_TERMS, "Only owner can withdraw", Unauthorized),
    ],
)
def test_reverts_become_exchange_errors(terms, reason, error_cls):
    with pytest.raises(error_cls) as exc:
        with offline_client(terms)._reverts():
            raise Rejected(reason)
    assert exc.value.reason == reason
    assert isinstance(exc.value.__cause__, LogicException)


def test_unknown_reverts_propagate():
    with pytest.raises(Rejected):
        with offline_client(WORLD_TERMS)._reverts():
            raise Rejected("opcode budget exceeded")


def test_other_exceptions_untouched():
    with pytest.raises(ValueError):
        with offline_client(WORLD_TERMS)._reverts():
            raise ValueError("bad address")
