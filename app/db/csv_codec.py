"""
CSV codec for the entity files.

Each file has a header row and one record per entity. Multi-valued cells
(ID lists) are joined with ';'. Writes always go to a temp file in the
target directory followed by os.replace, so a crash mid-write leaves the
previous file intact.
"""

import csv
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

LIST_SEPARATOR = ";"


def read_records(path: Path) -> List[Dict[str, str]]:
    """
    Read every data row as a header -> value dict.

    A missing file yields no rows. Cells missing from short rows read as
    "", so callers treat "missing" and "blank" the same way via `field()`.
    """
    path = Path(path)
    if not path.exists():
        return []

    records = []
    # utf-8-sig drops a BOM written by spreadsheet tools
    with path.open("r", newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        for row in reader:
            record = {
                key.strip(): (value if value is not None else "")
                for key, value in row.items()
                if key is not None
            }
            if not any(v.strip() for v in record.values()):
                continue
            records.append(record)
    return records


def write_records(path: Path, headers: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
    """
    Rewrite `path` with `headers` + `rows` atomically.

    Raises OSError (or csv.Error) if anything fails; the original file is
    untouched in that case and the temp file is removed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(headers)
            writer.writerows(rows)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    logger.debug("Rewrote %s", path)


def field(record: Mapping[str, str], *names: str, default: str = "") -> str:
    """
    First non-blank value among the candidate column names.

    Several files carry legacy column names (e.g. Email instead of
    CompanyRepID), so callers list the canonical name first.
    """
    for name in names:
        value = record.get(name)
        if value is not None and value.strip():
            return value.strip()
    return default


def parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return default


def parse_bool(value: str, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("true", "yes", "1")


def split_ids(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(LIST_SEPARATOR) if part.strip()]


def join_ids(ids: Iterable[str]) -> str:
    return LIST_SEPARATOR.join(ids)
