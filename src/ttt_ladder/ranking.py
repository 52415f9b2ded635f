"""
Player ranking store and its fixed-record binary file.

File layout (little-endian, no version tag, no checksum):

    record_count : uint64
    record_count x record (56 bytes):
        name       : 40 bytes, UTF-8, NUL-padded
        win_count  : int32
        lose_count : int32
        draw_count : int32
        score      : int32

The layout matches a 64-bit little-endian host and is pinned to it rather
than following the running machine.
"""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

import numpy as np

from .paths import ensure_parent

NAME_SIZE = 40
MAX_NAME_BYTES = NAME_SIZE - 1
COUNT_DTYPE = np.dtype("<u8")
RECORD_DTYPE = np.dtype([
    ("name", f"S{NAME_SIZE}"),
    ("win_count", "<i4"),
    ("lose_count", "<i4"),
    ("draw_count", "<i4"),
    ("score", "<i4"),
])
_INT32_MIN, _INT32_MAX = -(2 ** 31), 2 ** 31 - 1

PathLike = Union[str, "os.PathLike[str]"]


class RankingIOError(OSError):
    """Reading or writing the ranking file failed."""


def validate_name(name: str) -> str:
    if not name:
        raise ValueError("Name must not be empty")
    if any(ch.isspace() for ch in name) or "\x00" in name:
        raise ValueError("Name must not contain whitespace")
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        raise ValueError(f"Name longer than {MAX_NAME_BYTES} bytes: {name!r}")
    return name


@dataclass
class PlayerRecord:
    name: str
    win_count: int = 0
    lose_count: int = 0
    draw_count: int = 0
    score: int = 0

    def __post_init__(self) -> None:
        validate_name(self.name)

    def sort_key(self):
        return (-self.score, self.name)


class RankingStore:
    """Player records keyed by name, viewed in rank order.

    Records are held in a dict, so a name appears at most once no matter how
    callers use ``commit``. The ordered view is rebuilt by ``resort`` and is
    also refreshed lazily after any change.
    """

    def __init__(self, records: Iterable[PlayerRecord] = ()) -> None:
        self._by_name: Dict[str, PlayerRecord] = {}
        self._ordered: List[PlayerRecord] = []
        self._stale = False
        for r in records:
            self.commit(r)
        self.resort()

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[PlayerRecord]:
        return iter(self.records)

    @property
    def records(self) -> List[PlayerRecord]:
        if self._stale:
            self.resort()
        return list(self._ordered)

    def get(self, name: str) -> Optional[PlayerRecord]:
        return self._by_name.get(name)

    def checkout(self, name: str) -> PlayerRecord:
        """Remove and return ``name``'s record, or a fresh one for a new player."""
        record = self._by_name.pop(name, None)
        if record is None:
            return PlayerRecord(name=name)
        self._stale = True
        return record

    def commit(self, record: PlayerRecord) -> None:
        if record.name in self._by_name:
            logging.debug("Replacing existing record for %s", record.name)
        self._by_name[record.name] = record
        self._stale = True

    def resort(self) -> None:
        self._ordered = sorted(self._by_name.values(), key=PlayerRecord.sort_key)
        self._stale = False


def _check_int32(record: PlayerRecord) -> None:
    for field_name in ("win_count", "lose_count", "draw_count", "score"):
        v = getattr(record, field_name)
        if not _INT32_MIN <= v <= _INT32_MAX:
            raise ValueError(f"{record.name}.{field_name} does not fit in int32: {v}")


def encode_records(records: List[PlayerRecord]) -> bytes:
    arr = np.zeros(len(records), dtype=RECORD_DTYPE)
    for i, r in enumerate(records):
        _check_int32(r)
        arr[i] = (
            validate_name(r.name).encode("utf-8"),
            r.win_count,
            r.lose_count,
            r.draw_count,
            r.score,
        )
    header = np.array(len(records), dtype=COUNT_DTYPE)
    return header.tobytes() + arr.tobytes()


def decode_records(data: bytes) -> List[PlayerRecord]:
    if len(data) < COUNT_DTYPE.itemsize:
        raise RankingIOError("unable to read record count")
    count = int(np.frombuffer(data, dtype=COUNT_DTYPE, count=1)[0])
    body = data[COUNT_DTYPE.itemsize:]
    expected = count * RECORD_DTYPE.itemsize
    if len(body) < expected:
        raise RankingIOError(
            f"unable to read records: expected {count} ({expected} bytes), got {len(body)} bytes"
        )
    if len(body) > expected:
        raise RankingIOError(f"{len(body) - expected} unexpected trailing bytes after {count} records")
    if count == 0:
        return []
    arr = np.frombuffer(body, dtype=RECORD_DTYPE, count=count)
    records: List[PlayerRecord] = []
    for row in arr:
        try:
            name = bytes(row["name"]).decode("utf-8")
            records.append(PlayerRecord(
                name=name,
                win_count=int(row["win_count"]),
                lose_count=int(row["lose_count"]),
                draw_count=int(row["draw_count"]),
                score=int(row["score"]),
            ))
        except ValueError as exc:  # UnicodeDecodeError is a ValueError
            raise RankingIOError(f"corrupt record: {exc}") from exc
    return records


def load(path: PathLike) -> RankingStore:
    """Load a store from ``path``; only a missing file gives an empty store."""
    p = Path(path)
    try:
        data = p.read_bytes()
    except FileNotFoundError:
        logging.info("No ranking file at %s; starting with an empty scoreboard", p)
        return RankingStore()
    except OSError as exc:
        raise RankingIOError(f"unable to read {p}: {exc}") from exc
    records = decode_records(data)
    names = {r.name for r in records}
    if len(names) != len(records):
        logging.warning("Ranking file %s has duplicate names; keeping the last of each", p)
    store = RankingStore(records)
    logging.info("Loaded %d player records from %s", len(store), p)
    return store


def save(store: RankingStore, path: PathLike) -> None:
    """Write ``store`` to ``path`` atomically (temp file + rename)."""
    p = Path(path)
    payload = encode_records(store.records)
    try:
        ensure_parent(p)
        fd, tmp = tempfile.mkstemp(dir=str(p.parent), prefix=f".{p.name}.")
    except OSError as exc:
        raise RankingIOError(f"unable to write {p}: {exc}") from exc
    try:
        with os.fdopen(fd, "wb") as f:
            written = f.write(payload)
            if written != len(payload):
                raise RankingIOError(f"short write to {p}: {written}/{len(payload)} bytes")
        os.replace(tmp, p)
    except RankingIOError:
        raise
    except OSError as exc:
        raise RankingIOError(f"unable to write {p}: {exc}") from exc
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)
    logging.info("Saved %d player records to %s", len(store), p)
