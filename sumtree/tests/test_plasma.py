from __future__ import annotations

from dataclasses import replace

import pytest

from sumtree.constants import MAX_COIN_ID, MIN_COIN_ID
from sumtree.errors import NodeError
from sumtree.models import Transaction, Transfer
from sumtree.plasma import PlasmaLeafParser, build_plasma_tree
from sumtree.proofs import get_transfer_proof
from sumtree.utils.hash import keccak256
from sumtree.verify import check_transfer_proof

from .txutils import ACCOUNTS, make_tx, sequential_txs


def _sums(tree):
    return [n.sum for n in tree.levels[0]]


# ---- construction ------------------------------------------------------------

def test_empty_tree_root_is_none():
    assert build_plasma_tree().root() is None
    assert build_plasma_tree([]).root() is None


def test_single_leaf_claims_whole_space(tx1):
    tree = build_plasma_tree([tx1])
    root = tree.root()
    assert root.sum == MAX_COIN_ID
    assert root.digest == keccak256(tx1.encode())


def test_two_leaf_sums_and_root(tx1, tx2):
    tree = build_plasma_tree([tx1, tx2])
    first, second = tree.levels[0]
    assert first.sum == tx2.transfers[0].start - MIN_COIN_ID
    assert second.sum == MAX_COIN_ID - tx2.transfers[0].start
    assert tree.root().sum == first.sum + second.sum == MAX_COIN_ID
    assert tree.root().digest == keccak256(first.digest + second.digest)


def test_three_leaf_sums_cover_space(tx1, tx2, tx3):
    tree = build_plasma_tree([tx1, tx2, tx3])
    assert _sums(tree) == [6, 100 - 6, MAX_COIN_ID - 100]
    assert tree.root().sum == MAX_COIN_ID


def test_interior_sums_are_gaps_between_starts():
    tree = build_plasma_tree(sequential_txs(6))
    assert _sums(tree) == [10, 10, 10, 10, 10, MAX_COIN_ID - 50]


def test_leaves_are_sorted_by_start(tx1, tx2, tx3):
    ordered = build_plasma_tree([tx1, tx2, tx3])
    shuffled = build_plasma_tree([tx3, tx1, tx2])
    assert ordered.levels[0] == shuffled.levels[0]
    assert ordered.root() == shuffled.root()
    assert [p.source_index for p in shuffled.parsed_leaves] == [1, 2, 0]


def test_sort_uses_exact_integer_comparison():
    # Starts that differ only far beyond float precision
    base = 1 << 90
    txs = [make_tx(base + 3, base + 4), make_tx(base + 1, base + 2), make_tx(base + 2, base + 3)]
    tree = build_plasma_tree(txs)
    assert [p.source_index for p in tree.parsed_leaves] == [1, 2, 0]
    assert _sums(tree) == [base + 2, 1, MAX_COIN_ID - (base + 3)]


def test_equal_starts_keep_input_order():
    a = make_tx(5, 6, sender=0)
    b = make_tx(5, 6, sender=2)
    tree = build_plasma_tree([a, b])
    assert [p.source_index for p in tree.parsed_leaves] == [0, 1]


def test_each_transfer_becomes_a_leaf(multi_tx, tx1):
    tree = build_plasma_tree([multi_tx, tx1])
    parsed = tree.parsed_leaves
    assert len(parsed) == 3
    # tx1 [2,3) < multi_tx.t_lo [45,50) < multi_tx.t_hi [500,520)
    assert [(p.source_index, p.transfer_index) for p in parsed] == [(1, 0), (0, 1), (0, 0)]
    # both transfers of multi_tx hash its unsigned body
    assert parsed[1].node.digest == parsed[2].node.digest == keccak256(multi_tx.transaction.encode())


def test_custom_coin_bounds(tx1, tx2, cfg):
    small = replace(cfg, min_coin_id=1, max_coin_id=1000)
    tree = build_plasma_tree([tx1, tx2], config=small)
    assert _sums(tree) == [6 - 1, 1000 - 6]
    assert build_plasma_tree([tx1], config=small).root().sum == 1000
    for i, tx in enumerate((tx1, tx2)):
        proof = get_transfer_proof(tree, i)
        assert check_transfer_proof(tx, 0, proof, tree.root(), config=small), f"leaf {i}"


def test_parser_from_env_config(monkeypatch, tx1):
    monkeypatch.setenv("SUMTREE_MAX_COIN_ID", "0xffff")
    parser = PlasmaLeafParser.from_config()
    assert parser.max_coin_id == 0xFFFF
    assert build_plasma_tree([tx1]).root().sum == 0xFFFF


def test_start_below_min_coin_id_is_rejected(tx1, tx2, cfg):
    with pytest.raises(NodeError):
        build_plasma_tree([tx1, tx2], config=replace(cfg, min_coin_id=10))


def test_tree_keeps_source_records(tx1, tx2):
    tree = build_plasma_tree([tx2, tx1])
    assert tree.leaves == (tx2, tx1)


def test_parser_entries_flatten_transfers():
    t = Transaction(
        block=1,
        transfers=(
            Transfer(ACCOUNTS[0], ACCOUNTS[1], 0, 30, 40),
            Transfer(ACCOUNTS[0], ACCOUNTS[1], 0, 10, 20),
        ),
    )
    entries = PlasmaLeafParser(0, 100).entries([t])
    assert [(e.start, e.end, e.transfer_index) for e in entries] == [(10, 20, 1), (30, 40, 0)]
