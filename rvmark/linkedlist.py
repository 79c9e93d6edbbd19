"""Linked-list benchmark: find, reverse, sort and CRC a list of small records.

The list always starts with a sentinel head record (index 0) and ends with a
sentinel tail record (index 0x7fff).  Every operation works on the nodes in
place, and a full :func:`bench_list` pass leaves the list as it found it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from rvmark.crc import crc16, crcu16
from rvmark.matrix import MatParams, bench_matrix
from rvmark.state import bench_state

__all__ = [
    "ListData",
    "ListNode",
    "CoreResults",
    "calc_func",
    "cmp_complex",
    "cmp_idx",
    "list_init",
    "list_find",
    "list_reverse",
    "list_remove",
    "list_undo_remove",
    "list_mergesort",
    "bench_list",
]

# Bytes reserved per list item: a node header plus a 4-byte data record.
_BYTES_PER_ITEM = 16 + 4
_HEAD_DATA = 0x8080
_TAIL_IDX = 0x7FFF
_TAIL_DATA = 0xFFFF


def _to_s16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


@dataclass
class ListData:
    """One data record: a 16-bit payload and the record's original position."""

    data16: int = 0
    idx: int = 0


@dataclass(eq=False)
class ListNode:
    """A singly linked list node pointing at its data record."""

    info: ListData
    next: ListNode | None = field(default=None, repr=False)

    def __iter__(self) -> Iterator[ListNode]:
        node: ListNode | None = self
        while node is not None:
            yield node
            node = node.next


@dataclass
class CoreResults:
    """Inputs, working data and CRC outputs of one benchmark context."""

    seed1: int = 0
    seed2: int = 0
    seed3: int = 0
    size: int = 0
    iterations: int = 0
    execs: int = 0x7
    head: ListNode | None = None
    mat: MatParams | None = None
    state: bytearray | None = None
    crc: int = 0
    crclist: int = 0
    crcmatrix: int = 0
    crcstate: int = 0
    err: int = 0


ListCmp = Callable[[ListData, ListData, "CoreResults | None"], int]


def calc_func(item: ListData, res: CoreResults) -> int:
    """Return the 7-bit value encoded in ``item``, computing and caching it.

    Bit 7 of the payload marks a cached result held in the low 7 bits.
    Otherwise bits 0-2 select the operation (0: state benchmark, 1: matrix
    benchmark, other: the payload itself) and bits 3-6 its parameter; the
    result is folded into ``res.crc`` and cached in the payload.
    """
    data = _to_s16(item.data16)
    if (data >> 7) & 1:
        return data & 0x007F

    flag = data & 0x7
    dtype = (data >> 3) & 0xF
    dtype |= dtype << 4
    if flag == 0:
        if res.state is None:
            raise ValueError("state benchmark data is not initialised")
        dtype = max(dtype, 0x22)
        retval = bench_state(
            res.size, res.state, res.seed1, res.seed2, dtype, res.crc
        )
        if res.crcstate == 0:
            res.crcstate = retval & 0xFFFF
    elif flag == 1:
        if res.mat is None:
            raise ValueError("matrix benchmark data is not initialised")
        retval = bench_matrix(res.mat, dtype, res.crc)
        if res.crcmatrix == 0:
            res.crcmatrix = retval & 0xFFFF
    else:
        retval = data

    res.crc = crcu16(retval & 0xFFFF, res.crc)
    retval &= 0x007F
    item.data16 = _to_s16((data & 0xFF00) | 0x0080 | retval)
    return retval


def cmp_complex(a: ListData, b: ListData, res: CoreResults | None) -> int:
    """Compare two records by their computed values (see :func:`calc_func`)."""
    if res is None:
        raise ValueError("complex comparison needs benchmark results")
    return calc_func(a, res) - calc_func(b, res)


def cmp_idx(a: ListData, b: ListData, res: CoreResults | None) -> int:
    """Compare two records by index.

    When ``res`` is None the payloads are regenerated: the low byte is
    restored from the backup copy in the high byte.
    """
    if res is None:
        for rec in (a, b):
            rec.data16 = _to_s16((rec.data16 & 0xFF00) | (0x00FF & (rec.data16 >> 8)))
    return a.idx - b.idx


def list_init(blksize: int, seed: int) -> ListNode:
    """Build the benchmark list that a block of ``blksize`` bytes can hold.

    The list is returned sorted by index, headed by the sentinel record.
    """
    size = blksize // _BYTES_PER_ITEM - 2
    if size < 3:
        raise ValueError(f"list block size {blksize} is too small")
    seed = _to_s16(seed)

    head = ListNode(ListData(data16=_to_s16(_HEAD_DATA), idx=0))
    records = [ListData(data16=_to_s16(_TAIL_DATA), idx=_TAIL_IDX)]
    for i in range(size):
        datpat = ((seed ^ i) & 0xFFFF) & 0xF
        dat = (datpat << 3) | (i & 0x7)
        records.append(ListData(data16=_to_s16((dat << 8) | dat)))

    # Each record is inserted right after the head while capacity lasts.
    for record in records[: size - 2]:
        head.next = ListNode(ListData(record.data16, record.idx), head.next)

    finder = head.next
    i = 1
    while finder is not None and finder.next is not None:
        if i < size // 5:
            finder.info.idx = i
            i += 1
        else:
            pat = (i ^ seed) & 0xFFFF
            i += 1
            finder.info.idx = 0x3FFF & (((i & 0x07) << 8) | pat)
        finder = finder.next

    sorted_head = list_mergesort(head, cmp_idx, None)
    assert sorted_head is not None
    return sorted_head


def list_find(head: ListNode | None, idx: int, data: int = 0) -> ListNode | None:
    """Find the first node with index ``idx``.

    When ``idx`` is negative, find the first node whose payload's low byte
    equals ``data`` instead.  Returns None when nothing matches.
    """
    node = head
    if idx >= 0:
        while node is not None and node.info.idx != idx:
            node = node.next
    else:
        while node is not None and (node.info.data16 & 0xFF) != data:
            node = node.next
    return node


def list_reverse(head: ListNode | None) -> ListNode | None:
    """Reverse the list in place and return its new head."""
    reversed_head: ListNode | None = None
    node = head
    while node is not None:
        following = node.next
        node.next = reversed_head
        reversed_head = node
        node = following
    return reversed_head


def list_remove(item: ListNode) -> ListNode:
    """Unlink the item after ``item``, keeping ``item``'s data out of the list.

    The data records of ``item`` and its successor are swapped, then the
    successor node is unlinked and returned carrying the removed record.
    """
    removed = item.next
    if removed is None:
        raise ValueError("cannot remove past the end of the list")
    item.info, removed.info = removed.info, item.info
    item.next = removed.next
    removed.next = None
    return removed


def list_undo_remove(removed: ListNode, modified: ListNode) -> ListNode:
    """Reverse :func:`list_remove`: relink ``removed`` after ``modified``."""
    removed.info, modified.info = modified.info, removed.info
    removed.next = modified.next
    modified.next = removed
    return removed


def list_mergesort(
    head: ListNode | None, cmp: ListCmp, res: CoreResults | None
) -> ListNode | None:
    """Stable, non-recursive merge sort of the list; returns the new head."""
    if head is None:
        return None
    insize = 1
    lst: ListNode | None = head
    while True:
        p = lst
        lst = None
        tail: ListNode | None = None
        nmerges = 0

        while p is not None:
            nmerges += 1
            q: ListNode | None = p
            psize = 0
            for _ in range(insize):
                psize += 1
                q = q.next if q is not None else None
                if q is None:
                    break
            qsize = insize

            while psize > 0 or (qsize > 0 and q is not None):
                if psize == 0:
                    e, q = q, q.next
                    qsize -= 1
                elif qsize == 0 or q is None:
                    e, p = p, p.next
                    psize -= 1
                elif cmp(p.info, q.info, res) <= 0:
                    e, p = p, p.next
                    psize -= 1
                else:
                    e, q = q, q.next
                    qsize -= 1

                if tail is not None:
                    tail.next = e
                else:
                    lst = e
                tail = e

            p = q

        assert tail is not None
        tail.next = None
        if nmerges <= 1:
            return lst
        insize *= 2


def bench_list(res: CoreResults, finder_idx: int) -> int:
    """Run one pass of the list benchmark and return its 16-bit CRC.

    Searches the list ``res.seed3`` times (by index when ``finder_idx`` is
    non-negative, otherwise by payload), reversing it each time; sorts by
    computed value when ``finder_idx`` is positive; removes and restores an
    item; and finally sorts by index, returning the list to its start state.
    """
    lst = res.head
    if lst is None or lst.next is None:
        raise ValueError("list benchmark data is not initialised")
    retval = 0
    found = 0
    missed = 0
    find_num = _to_s16(res.seed3)
    info_idx = _to_s16(finder_idx)
    info_data = 0

    for i in range(max(find_num, 0)):
        info_data = i & 0xFF
        this_find = list_find(lst, info_idx, info_data)
        lst = list_reverse(lst)
        assert lst is not None
        if this_find is None:
            missed += 1
            assert lst.next is not None
            retval += (lst.next.info.data16 >> 8) & 1
        else:
            found += 1
            if this_find.info.data16 & 0x1:
                retval += (this_find.info.data16 >> 9) & 1
            if this_find.next is not None:
                finder = this_find.next
                this_find.next = finder.next
                finder.next = lst.next
                lst.next = finder
        if info_idx >= 0:
            info_idx = _to_s16(info_idx + 1)

    retval = (retval + found * 4 - missed) & 0xFFFF

    if finder_idx > 0:
        lst = list_mergesort(lst, cmp_complex, res)
    assert lst is not None and lst.next is not None
    remover = list_remove(lst.next)

    start = list_find(lst, info_idx, info_data) or lst.next
    for _ in start if start is not None else ():
        retval = crc16(lst.info.data16, retval)

    assert lst.next is not None
    list_undo_remove(remover, lst.next)

    lst = list_mergesort(lst, cmp_idx, None)
    assert lst is not None
    for _ in lst.next if lst.next is not None else ():
        retval = crc16(lst.info.data16, retval)

    res.head = lst
    return retval