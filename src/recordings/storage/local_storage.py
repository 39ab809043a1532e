"""Local filesystem enumeration for the recordings folder."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from config.settings import Settings
from recordings.models import FileRecord, FileSource


class LocalFileStore:
    """Lists recordings stored in a local directory."""

    def __init__(self, logger_obj: Optional[logging.Logger] = None):
        self.logger = logger_obj or logging.getLogger(__name__)

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def list_dir(self, path: Path) -> List[FileRecord]:
        """
        List non-directory entries of ``path`` sorted by name.

        Raises:
            OSError: If the directory cannot be read
        """
        directory = Path(path)
        records = []
        for entry in directory.iterdir():
            if entry.is_dir():
                continue
            stat = entry.stat()
            records.append(
                FileRecord(
                    name=entry.name,
                    source=FileSource.LOCAL,
                    size=stat.st_size,
                    path=str(entry),
                    modified_at=datetime.fromtimestamp(stat.st_mtime),
                )
            )
        records.sort(key=lambda record: record.name)
        self.logger.debug(f"Listed {len(records)} files in {directory}")
        return records


def is_audio_file(name: str, extensions: Sequence[str] = Settings.AUDIO_EXTENSIONS) -> bool:
    return name.lower().endswith(tuple(extensions))


def filter_audio_files(
    records: Iterable[FileRecord],
    extensions: Sequence[str] = Settings.AUDIO_EXTENSIONS,
) -> List[FileRecord]:
    """Keep only records whose name has a known audio extension."""
    return [record for record in records if is_audio_file(record.name, extensions)]
