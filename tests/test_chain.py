import threading

import pytest

from starledger.chain.blockchain import Blockchain
from starledger.core.block import Block
from starledger.core.encoding import encode_body
from starledger.core.errors import ChainIntegrityError
from starledger.core.types import StarClaim, DataPayload


def add_star(chain: Blockchain, owner: str, star=None) -> Block:
    return chain._add_block(Block.from_payload(StarClaim(owner=owner, star=star or {"story": owner})))


@pytest.fixture
def chain(clock):
    return Blockchain(clock=clock)


@pytest.fixture
def three_block_chain(chain, clock):
    clock.advance(10)
    add_star(chain, "addr-b")
    clock.advance(10)
    add_star(chain, "addr-c")
    return chain


def test_genesis_created_on_construction(chain, clock):
    assert chain.height == 0
    assert chain.get_chain_height() == 0
    assert len(chain.chain) == 1
    genesis = chain.get_block_by_height(0)
    assert genesis.previous_block_hash is None
    assert genesis.time == clock.now
    assert genesis.check_integrity()
    assert genesis.decode_body() is None


def test_append_assigns_height_time_and_link(chain, clock):
    clock.advance(42)
    block = add_star(chain, "addr-1")
    assert block.height == 1
    assert block.time == clock.now
    assert block.previous_block_hash == chain.get_block_by_height(0).hash
    assert block.check_integrity()
    assert chain.height == 1
    assert chain.get_latest_block() is block


def test_caller_cannot_choose_height(chain):
    block = Block.from_payload(DataPayload("x"))
    block.height = 99
    chain._add_block(block)
    assert block.height == 1


def test_linkage_invariant(three_block_chain):
    blocks = three_block_chain.chain
    for i in range(1, len(blocks)):
        assert blocks[i].height == i
        assert blocks[i].previous_block_hash == blocks[i - 1].hash


def test_chain_property_is_a_copy(chain):
    snapshot = chain.chain
    snapshot.append("junk")
    assert len(chain.chain) == 1


def test_lookup_by_hash_and_height(three_block_chain):
    block = three_block_chain.get_block_by_height(2)
    assert three_block_chain.get_block_by_hash(block.hash) is block
    assert three_block_chain.get_block_by_hash("00" * 32) is None
    assert three_block_chain.get_block_by_hash(None) is None
    assert three_block_chain.get_block_by_height(3) is None
    assert three_block_chain.get_block_by_height(-1) is None


def test_stars_by_wallet_address(chain):
    add_star(chain, "x", {"n": 1})
    add_star(chain, "y", {"n": 2})
    add_star(chain, "x", {"n": 3})

    stars = chain.get_stars_by_wallet_address("x")
    assert stars == [StarClaim("x", {"n": 1}), StarClaim("x", {"n": 3})]
    assert chain.get_stars_by_wallet_address("nobody") == []


def test_valid_chain_passes(three_block_chain):
    three_block_chain.validate_chain()


def test_tamper_body_detected(three_block_chain):
    block_b = three_block_chain.get_block_by_height(1)
    block_b.body = encode_body({"owner": "mallory", "star": {}})

    with pytest.raises(ChainIntegrityError) as exc_info:
        three_block_chain.validate_chain()

    failures = exc_info.value.failures
    assert [f.index for f in failures] == [1]
    assert failures[0].category == "integrity"
    assert block_b.hash in exc_info.value.errors[0]


def test_tamper_stays_detected(three_block_chain):
    three_block_chain.get_block_by_height(1).time += 1
    for _ in range(2):
        with pytest.raises(ChainIntegrityError):
            three_block_chain.validate_chain()


def test_all_faults_reported_in_walk_order(three_block_chain):
    three_block_chain.get_block_by_height(1).time += 1
    three_block_chain.get_block_by_height(2).time += 1

    with pytest.raises(ChainIntegrityError) as exc_info:
        three_block_chain.validate_chain()
    assert [f.index for f in exc_info.value.failures] == [2, 1]


def test_tampered_genesis_detected(three_block_chain):
    three_block_chain.get_block_by_height(0).body = encode_body({"data": "rewritten"})
    with pytest.raises(ChainIntegrityError) as exc_info:
        three_block_chain.validate_chain()
    assert [f.index for f in exc_info.value.failures] == [0]


def test_broken_link_detected(three_block_chain):
    block_c = three_block_chain.get_block_by_height(2)
    block_c.previous_block_hash = "de" * 32
    block_c.recompute_hash()

    with pytest.raises(ChainIntegrityError) as exc_info:
        three_block_chain.validate_chain()
    failures = exc_info.value.failures
    assert len(failures) == 1
    assert failures[0].category == "linkage"
    assert failures[0].index == 2


def test_append_onto_tampered_chain_raises_and_keeps_block(three_block_chain):
    three_block_chain.get_block_by_height(1).time += 1
    with pytest.raises(ChainIntegrityError):
        add_star(three_block_chain, "addr-d")
    assert three_block_chain.height == 3
    assert three_block_chain.get_latest_block().decode_body().owner == "addr-d"


def test_empty_chain_reports_missing_latest(chain):
    chain._chain.clear()
    chain._height = -1
    with pytest.raises(ChainIntegrityError) as exc_info:
        chain.validate_chain()
    assert exc_info.value.errors == ["Latest block not found"]


def test_concurrent_appends_keep_linkage(chain):
    def worker(n):
        for i in range(10):
            add_star(chain, f"owner-{n}", {"i": i})

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert chain.height == 40
    blocks = chain.chain
    for i in range(1, len(blocks)):
        assert blocks[i].height == i
        assert blocks[i].previous_block_hash == blocks[i - 1].hash
    chain.validate_chain()
