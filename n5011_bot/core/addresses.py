from __future__ import annotations

from typing import List, Sequence, Tuple

from n5011_bot.core.models import DirectoryRecord

EMPTY_DIRECTORY = "empty directory list"


def address_sort_key(address: str) -> Tuple[int, int]:
    """
    Numeric (primary, point) key of an address like "2:5011/102.1".

    Anything that does not parse sorts as (0, 0).
    """
    _, sep, node = address.strip().rpartition("/")
    if not sep:
        return (0, 0)
    primary, _, point = node.partition(".")
    try:
        return (int(primary), int(point) if point else 0)
    except ValueError:
        return (0, 0)


def _is_extension(address: str, kept: str) -> bool:
    # "2:5011/102.1" extends "2:5011/102"; "2:5011/1020" does not
    return address == kept or address.startswith(kept + ".")


def normalize_directory(records: Sequence[DirectoryRecord], *, strip_prefix: str = "2:5011/") -> str:
    """
    Turn the directory records of one owner into an announcement line:
    "Name, 102, 2:463/68.3".

    Addresses are ordered by node and point number, a node's own points are
    collapsed into the node, and the local network prefix is dropped.
    """
    if not records:
        return EMPTY_DIRECTORY

    header = records[0].display_name
    # address text breaks ties between equal node numbers in different nets
    ordered = sorted(records, key=lambda r: (*address_sort_key(r.address), r.address.strip()))

    kept: List[str] = []
    for rec in ordered:
        address = rec.address.strip()
        if kept and _is_extension(address, kept[-1]):
            continue
        kept.append(address)

    if strip_prefix:
        kept = [a[len(strip_prefix):] if a.startswith(strip_prefix) else a for a in kept]

    return ", ".join([header, *kept])


def short_form(addr: str) -> str:
    """First two comma separated tokens of a normalized address line."""
    return ",".join(addr.split(",")[:2])
