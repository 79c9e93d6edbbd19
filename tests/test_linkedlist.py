import pytest

from rvmark.crc import crcu16
from rvmark.linkedlist import (
    CoreResults,
    ListData,
    ListNode,
    bench_list,
    calc_func,
    cmp_complex,
    cmp_idx,
    list_find,
    list_init,
    list_mergesort,
    list_remove,
    list_reverse,
    list_undo_remove,
)
from rvmark.matrix import init_matrix
from rvmark.state import init_state


def _snapshot(head):
    return [(node.info.idx, node.info.data16) for node in head]


def _build(records):
    head = None
    for idx, data in reversed(records):
        head = ListNode(ListData(data16=data, idx=idx), head)
    return head


def _results(seed1, seed2, seed3, size):
    res = CoreResults(seed1=seed1, seed2=seed2, seed3=seed3, size=size)
    res.head = list_init(size, seed1)
    res.mat = init_matrix(size, seed1 | (seed2 << 16))
    res.state = init_state(size, seed1)
    return res


def test_list_init_sentinels_and_order():
    head = list_init(666, 0)
    snap = _snapshot(head)
    assert len(snap) == 30
    assert snap[0] == (0, 0x8080 - 0x10000)
    assert snap[-1] == (0x7FFF, -1)
    indices = [idx for idx, _ in snap]
    assert indices == sorted(indices)


def test_list_init_payload_backup_matches_value():
    head = list_init(2000, 0x3415)
    for node in head:
        data = node.info.data16 & 0xFFFF
        assert data >> 8 == data & 0xFF


def test_list_init_too_small():
    with pytest.raises(ValueError):
        list_init(50, 0)


def test_list_find_by_index_and_data():
    head = _build([(0, 0x0101), (5, 0x0203), (7, 0x0307)])
    assert list_find(head, 5).info.data16 == 0x0203
    assert list_find(head, -1, 0x07).info.idx == 7
    assert list_find(head, 9) is None
    assert list_find(head, -1, 0x55) is None


def test_list_reverse_twice_is_identity():
    head = list_init(666, 0)
    before = _snapshot(head)
    reversed_head = list_reverse(head)
    assert _snapshot(reversed_head) == before[::-1]
    assert _snapshot(list_reverse(reversed_head)) == before
    assert list_reverse(None) is None


def test_remove_and_undo_restore_list():
    head = list_init(666, 0x3415)
    before = _snapshot(head)
    removed = list_remove(head.next)
    assert removed.next is None
    assert (removed.info.idx, removed.info.data16) == before[1]
    assert _snapshot(head) == before[:1] + before[2:]
    list_undo_remove(removed, head.next)
    assert _snapshot(head) == before


def test_mergesort_is_stable_by_index():
    head = _build([(3, 10), (1, 20), (2, 30), (1, 40)])
    sorted_head = list_mergesort(head, cmp_idx, CoreResults())
    assert _snapshot(sorted_head) == [(1, 20), (1, 40), (2, 30), (3, 10)]


def test_mergesort_empty_list():
    assert list_mergesort(None, cmp_idx, None) is None


def test_cmp_idx_regenerates_payload_without_results():
    a = ListData(data16=0x1234, idx=4)
    b = ListData(data16=0x5600, idx=9)
    assert cmp_idx(a, b, None) == 4 - 9
    for rec in (a, b):
        assert (rec.data16 >> 8) & 0xFF == rec.data16 & 0xFF


def test_cmp_idx_keeps_payload_with_results():
    a = ListData(data16=0x1234, idx=4)
    b = ListData(data16=0x5600, idx=2)
    assert cmp_idx(a, b, CoreResults()) == 2
    assert (a.data16, b.data16) == (0x1234, 0x5600)


def test_calc_func_plain_value_cached():
    item = ListData(data16=0x0012)
    res = CoreResults()
    assert calc_func(item, res) == 0x12
    assert item.data16 == 0x0092
    assert res.crc == crcu16(0x12, 0)
    crc_after = res.crc
    assert calc_func(item, res) == 0x12
    assert res.crc == crc_after


def test_calc_func_uses_cache_bit():
    res = CoreResults(crc=0x1111)
    assert calc_func(ListData(data16=0x00C5), res) == 0x45
    assert res.crc == 0x1111


def test_calc_func_state_records_crcstate():
    res = _results(0, 0, 0x66, 666)
    state_before = bytes(res.state)
    item = ListData(data16=0x0000)
    result = calc_func(item, res)
    assert res.crcstate != 0
    assert result == res.crcstate & 0x7F
    assert res.crc == crcu16(res.crcstate, 0)
    assert bytes(res.state) == state_before


def test_calc_func_matrix_records_crcmatrix():
    res = _results(0, 0, 0x66, 666)
    item = ListData(data16=0x0001)
    result = calc_func(item, res)
    assert result == res.crcmatrix & 0x7F
    assert res.crc == crcu16(res.crcmatrix, 0)


def test_calc_func_missing_data_raises():
    with pytest.raises(ValueError):
        calc_func(ListData(data16=0x0000), CoreResults())
    with pytest.raises(ValueError):
        calc_func(ListData(data16=0x0001), CoreResults())


def test_cmp_complex_difference():
    res = CoreResults()
    a = ListData(data16=0x0012)
    b = ListData(data16=0x000A)
    assert cmp_complex(a, b, res) == 0x12 - 0x0A


@pytest.mark.parametrize("finder_idx", [1, -1])
def test_bench_list_restores_list(finder_idx):
    res = _results(0, 0, 0x66, 666)
    before = _snapshot(res.head)
    bench_list(res, finder_idx)
    assert _snapshot(res.head) == before


def test_bench_list_deterministic():
    first = _results(0x3415, 0x3415, 0x66, 666)
    second = _results(0x3415, 0x3415, 0x66, 666)
    assert bench_list(first, 1) == bench_list(second, 1)
    assert first.crc == second.crc


@pytest.mark.parametrize(
    "seeds, size, crclist, crcmatrix, crcstate",
    [
        ((0, 0, 0x66), 2000, 0xD4B0, 0xBE52, 0x5E47),
        ((0x3415, 0x3415, 0x66), 2000, 0x3340, 0x1199, 0x39BF),
        ((8, 8, 8), 400, 0x6A79, 0x5608, 0xE5A4),
        ((0, 0, 0x66), 666, 0xE714, 0x1FD7, 0x8E3A),
        ((0x3415, 0x3415, 0x66), 666, 0xE3C1, 0x0747, 0x8D84),
    ],
)
def test_known_crcs(seeds, size, crclist, crcmatrix, crcstate):
    res = _results(*seeds, size)
    crc = bench_list(res, 1)
    res.crc = crcu16(crc, res.crc)
    crc = bench_list(res, -1)
    res.crc = crcu16(crc, res.crc)
    assert res.crc == crclist
    assert res.crcmatrix == crcmatrix
    assert res.crcstate == crcstate