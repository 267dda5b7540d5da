import asyncio
import json
import logging
from pathlib import PurePath
from typing import Awaitable, Callable, Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from ..config import ResumeConfig
from ..errors import UnsupportedFileError
from ..local_storage import KeyValueStore
from .demo import DEMO_RESUMES
from .models import ResumeRecord, UploadedFile

logger = logging.getLogger(__name__)

_record_list = TypeAdapter(list[ResumeRecord])

_SIZE_UNITS = ("Bytes", "KB", "MB")


def format_file_size(size: int) -> str:
    """Human-readable size, e.g. 245760 -> "240 KB", 1536 -> "1.5 KB"."""
    if size <= 0:
        return "0 Bytes"
    scaled = float(size)
    unit = 0
    while scaled >= 1024 and unit < len(_SIZE_UNITS) - 1:
        scaled /= 1024
        unit += 1
    value = f"{scaled:.2f}".rstrip("0").rstrip(".")
    return f"{value} {_SIZE_UNITS[unit]}"


def matches(record: ResumeRecord, term: str) -> bool:
    """Case-insensitive substring match on file name, candidate, or any skill."""
    needle = term.lower()
    if needle in record.name.lower():
        return True
    if record.candidate and needle in record.candidate.lower():
        return True
    return any(needle in skill.lower() for skill in record.skills)


class ResumeLibrary:
    def __init__(
        self,
        storage: KeyValueStore,
        config: Optional[ResumeConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._storage = storage
        self.config = config or ResumeConfig()
        self._sleep = sleep

    def check_file(self, filename: str) -> None:
        suffix = PurePath(filename).suffix.lower()
        accepted = {ext.lower() for ext in self.config.accepted_extensions}
        if suffix not in accepted:
            raise UnsupportedFileError(filename)

    async def upload(
        self, files: Iterable[UploadedFile]
    ) -> tuple[list[ResumeRecord], list[str]]:
        """Store metadata for the accepted files; return (records, rejected names)."""
        accepted: list[UploadedFile] = []
        rejected: list[str] = []
        for f in files:
            try:
                self.check_file(f.name)
            except UnsupportedFileError as e:
                logger.info("Rejected upload: %s", e)
                rejected.append(f.name)
                continue
            accepted.append(f)

        if not accepted:
            return [], rejected

        # Simulated transfer time; no file content is read
        await self._sleep(self.config.upload_delay_seconds)

        records = [ResumeRecord(name=f.name, size=f.size) for f in accepted]
        stored = self._load_stored()
        stored.extend(records)
        self._save_stored(stored)
        logger.info("%d resume(s) uploaded successfully", len(records))
        return records, rejected

    def list_resumes(self) -> list[ResumeRecord]:
        records = self._load_stored()
        if self.config.include_demo_resumes:
            records.extend(r.model_copy() for r in DEMO_RESUMES)
        return records

    def search(self, term: str = "") -> list[ResumeRecord]:
        return [r for r in self.list_resumes() if matches(r, term)]

    def get(self, resume_id: str) -> Optional[ResumeRecord]:
        for r in self.list_resumes():
            if r.id == resume_id:
                return r
        return None

    def remove(self, resume_id: str) -> bool:
        """Remove an uploaded resume. Demo resumes cannot be removed."""
        stored = self._load_stored()
        remaining = [r for r in stored if r.id != resume_id]
        if len(remaining) == len(stored):
            return False
        self._save_stored(remaining)
        return True

    def _load_stored(self) -> list[ResumeRecord]:
        text = self._storage.load_snapshot(self.config.storage_key)
        if not text:
            return []
        try:
            return _record_list.validate_python(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to load stored resumes, starting empty: %s", e)
            return []

    def _save_stored(self, records: list[ResumeRecord]) -> None:
        self._storage.save_snapshot(
            self.config.storage_key,
            json.dumps(
                [r.model_dump(mode="json", by_alias=True) for r in records],
                ensure_ascii=False,
            ),
        )
