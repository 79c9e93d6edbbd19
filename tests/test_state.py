import pytest

from rvmark.state import (
    ERR_PATTERNS,
    FLOAT_PATTERNS,
    INT_PATTERNS,
    NUM_CORE_STATES,
    SCI_PATTERNS,
    CoreState,
    bench_state,
    init_state,
    state_transition,
)

ALL_PATTERNS = set(INT_PATTERNS + FLOAT_PATTERNS + SCI_PATTERNS + ERR_PATTERNS)


def _classify(token: bytes):
    counts = [0] * NUM_CORE_STATES
    state, pos = state_transition(token, 0, counts)
    return state, pos, counts


def test_init_state_small_block():
    assert init_state(20, 0) == bytearray(b"5012,5012," + bytes(10))


@pytest.mark.parametrize("size,seed", [(100, 0), (666, 0x3415), (2000 // 3, 8), (51, -1)])
def test_init_state_layout(size, seed):
    block = init_state(size, seed)
    assert len(block) == size
    assert block[-1] == 0
    text = bytes(block).rstrip(b"\x00")
    assert text.endswith(b",")
    tokens = text[:-1].split(b",")
    assert all(token in ALL_PATTERNS for token in tokens)
    assert b"\x00" not in text


def test_init_state_rejects_non_positive_size():
    with pytest.raises(ValueError):
        init_state(0, 1)


@pytest.mark.parametrize("token", INT_PATTERNS)
def test_int_patterns_are_int(token):
    assert _classify(token)[0] == CoreState.INT


@pytest.mark.parametrize("token", FLOAT_PATTERNS)
def test_float_patterns_are_float(token):
    assert _classify(token)[0] == CoreState.FLOAT


@pytest.mark.parametrize("token", [b"5.500e+3", b"-.123e-2", b"+0.6e-12"])
def test_scientific_patterns(token):
    assert _classify(token)[0] == CoreState.SCIENTIFIC


def test_exponent_without_fraction_is_invalid():
    assert _classify(b"-87e+832")[0] == CoreState.INVALID


@pytest.mark.parametrize("token", ERR_PATTERNS)
def test_error_patterns_are_invalid(token):
    assert _classify(token)[0] == CoreState.INVALID


def test_comma_ends_token_and_is_consumed():
    state, pos, counts = _classify(b"5012,1234")
    assert state == CoreState.INT
    assert pos == 5
    assert counts[CoreState.START] == 1
    assert sum(counts) == 1


def test_invalid_stops_after_bad_symbol():
    state, pos, counts = _classify(b"T0.3e-1F,5012")
    assert state == CoreState.INVALID
    assert pos == 1
    assert counts[CoreState.START] == 1
    assert counts[CoreState.INVALID] == 1


def test_zero_byte_terminates():
    state, pos, _ = _classify(b"12\x0034")
    assert state == CoreState.INT
    assert pos == 2


def test_counts_accumulate_across_calls():
    counts = [0] * NUM_CORE_STATES
    data = b"+122,+122,"
    state, pos = state_transition(data, 0, counts)
    state, pos = state_transition(data, pos, counts)
    assert state == CoreState.INT
    assert pos == len(data)
    assert counts[CoreState.START] == 2
    assert counts[CoreState.S1] == 2


def test_bench_state_restores_block_when_seeds_equal():
    block = init_state(666, 0x3415)
    original = bytes(block)
    bench_state(len(block), block, 0x3415, 0x3415, 0x22, 0)
    assert bytes(block) == original


def test_bench_state_leaves_block_changed_when_seeds_differ():
    block = init_state(666, 0)
    original = bytes(block)
    bench_state(len(block), block, 0x11, 0, 0x22, 0)
    assert bytes(block) != original
    assert block[0] == original[0] ^ 0x11


def test_bench_state_is_deterministic():
    first = init_state(400, 8)
    second = init_state(400, 8)
    crc_a = bench_state(400, first, 8, 8, 0x33, 0x1234)
    crc_b = bench_state(400, second, 8, 8, 0x33, 0x1234)
    assert crc_a == crc_b
    assert 0 <= crc_a <= 0xFFFF


def test_bench_state_rejects_non_positive_step():
    block = init_state(100, 0)
    with pytest.raises(ValueError):
        bench_state(100, block, 1, 1, 0, 0)