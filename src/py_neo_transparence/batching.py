# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from itertools import islice
from typing import Iterable, Iterator, List, TypeVar

T = TypeVar("T")


def batch(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """
    Lazily groups ``items`` into consecutive lists of ``size`` elements.

    The last chunk holds the remainder. Only one chunk is buffered at a time,
    so the source may be an unbounded generator. A non-positive ``size``
    yields no chunks at all.
    """
    if size <= 0:
        return
    iterator = iter(items)
    while True:
        chunk = list(islice(iterator, size))
        if not chunk:
            return
        yield chunk
