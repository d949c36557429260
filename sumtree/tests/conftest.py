from __future__ import annotations

import pytest

from sumtree.config import SumTreeConfig, get_config
from sumtree.models import Signature, SignedTransaction, Transaction, Transfer

from .txutils import ACCOUNTS, make_tx


@pytest.fixture(autouse=True)
def _fresh_config():
    # Environment-driven config is cached; tests that touch SUMTREE_* must see
    # their own values.
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def cfg() -> SumTreeConfig:
    return SumTreeConfig()


@pytest.fixture
def tx1() -> Transaction:
    return make_tx(2, 3, sender=0)


@pytest.fixture
def tx2() -> Transaction:
    return make_tx(6, 7, sender=2)


@pytest.fixture
def tx3() -> Transaction:
    return make_tx(100, 108, sender=2, token=1)


@pytest.fixture
def multi_tx() -> SignedTransaction:
    """Two transfers, deliberately listed out of coin order."""
    t_hi = Transfer(sender=ACCOUNTS[0], recipient=ACCOUNTS[1], token=0, start=500, end=520)
    t_lo = Transfer(sender=ACCOUNTS[2], recipient=ACCOUNTS[1], token=0, start=45, end=50)
    sigs = (
        Signature(v=27, r=b"\x11" * 32, s=b"\x22" * 32),
        Signature(v=28, r=b"\x33" * 32, s=b"\x44" * 32),
    )
    return SignedTransaction(block=7, transfers=(t_hi, t_lo), signatures=sigs)
