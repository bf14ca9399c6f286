from __future__ import annotations

import datetime
import re
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from loguru import logger

from santa_sorter.services.participants import Participant

FOLDER_NAME = "SecretSanta_{year}"
DOCUMENT_LINE = "{giver} is buying a present for {receiver}"
DEFAULT_FILE_NAME = "Unnamed"
OUTPUT_EXTENSION = ".txt"

# Characters rejected by Windows or POSIX file systems, plus control characters.
_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


@dataclass(frozen=True)
class ExportResult:
    directory: Path
    files: List[Path]


def sanitize_filename(name: str) -> str:
    cleaned = _INVALID_FILENAME_CHARS.sub("_", name).strip()
    stem = cleaned[: -len(OUTPUT_EXTENSION)] if cleaned.endswith(OUTPUT_EXTENSION) else cleaned
    if not stem.strip(" ._"):
        return DEFAULT_FILE_NAME + OUTPUT_EXTENSION
    return cleaned


def create_unique_directory(parent: Path, base_name: str) -> Path:
    parent.mkdir(parents=True, exist_ok=True)
    candidate = parent / base_name
    index = 2
    while True:
        try:
            candidate.mkdir()
            return candidate
        except FileExistsError:
            candidate = parent / f"{base_name}_{index}"
            index += 1


def ensure_unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    index = 2
    while True:
        candidate = path.with_name(f"{path.stem}_{index}{path.suffix}")
        if not candidate.exists():
            return candidate
        index += 1


def export_pairs(
    pairs: Iterable[Tuple[Participant, Participant]],
    base_dir,
    year: Optional[int] = None,
) -> ExportResult:
    """Write one ``<giver>.txt`` per pair into a fresh ``SecretSanta_<year>`` folder."""
    year = year or datetime.date.today().year
    target = create_unique_directory(Path(base_dir), FOLDER_NAME.format(year=year))

    files: List[Path] = []
    for giver, receiver in pairs:
        path = ensure_unique_path(target / sanitize_filename(f"{giver}{OUTPUT_EXTENSION}"))
        path.write_text(DOCUMENT_LINE.format(giver=giver, receiver=receiver) + "\n", encoding="utf-8")
        files.append(path)

    logger.bind(directory=str(target)).info("Exported {count} assignments", count=len(files))
    return ExportResult(directory=target, files=files)


@contextmanager
def temporary_export(
    pairs: Iterable[Tuple[Participant, Participant]],
    base_dir,
    year: Optional[int] = None,
) -> Iterator[ExportResult]:
    """Export into a scratch folder under ``base_dir`` that is deleted on exit."""
    base = Path(base_dir)
    base.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(dir=base, prefix="export-") as workdir:
        yield export_pairs(pairs, workdir, year)
    logger.bind(directory=str(base)).debug("Removed temporary export")
