"""
Locate the raw XML document for a single ORCID iD.

Records live at ``<shard>/<orcid>.xml`` where the shard is the last three
characters of the iD (the checksum block). A pre-extracted directory tree
is preferred; otherwise the member is pulled out of the public data
archive on demand.

Every lookup result, including a miss, is stored in the resolution cache.
A miss is stored as ``None`` and is never retried while that cache is in
use, even if the file appears later.
"""

import logging
import subprocess
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import MutableMapping, Optional

from .errors import ExtractionFailure, MissingRecord

logger = logging.getLogger(__name__)

SHARD_LENGTH = 3
DEFAULT_ARCHIVE_PREFIX = "summaries"
DEFAULT_EXTRACT_TIMEOUT = 300  # seconds; a single member of a ~30GB zip


def shard_for(identifier: str) -> str:
    """Return the shard directory for an identifier."""
    return identifier[-SHARD_LENGTH:]


def record_path(identifier: str) -> str:
    """Relative path of a record, shared by the directory tree and the archive."""
    return f"{shard_for(identifier)}/{identifier}.xml"


class ArchiveExtractor:
    """Extract one member of an archive as bytes."""

    def extract(self, member: str) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "ArchiveExtractor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class UnzipExtractor(ArchiveExtractor):
    """Stream a member to stdout with the ``unzip`` tool."""

    def __init__(self, archive_path: str | Path, timeout: float = DEFAULT_EXTRACT_TIMEOUT, unzip_bin: str = "unzip"):
        self.archive_path = Path(archive_path)
        self.timeout = timeout
        self.unzip_bin = unzip_bin

    def extract(self, member: str) -> bytes:
        cmd = [self.unzip_bin, "-p", str(self.archive_path), member]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self.timeout)
        except FileNotFoundError:
            raise ExtractionFailure(member, f"{self.unzip_bin} not found on PATH")
        except subprocess.TimeoutExpired:
            raise ExtractionFailure(member, f"{self.unzip_bin} timed out after {self.timeout}s")

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise ExtractionFailure(member, stderr or f"{self.unzip_bin} exited with status {result.returncode}")
        return result.stdout


class ZipFileExtractor(ArchiveExtractor):
    """Read a member with :mod:`zipfile`, for hosts without ``unzip``."""

    def __init__(self, archive_path: str | Path):
        self.archive_path = Path(archive_path)
        self._zip: Optional[zipfile.ZipFile] = None

    def _open(self) -> zipfile.ZipFile:
        if self._zip is None:
            try:
                self._zip = zipfile.ZipFile(self.archive_path)
            except (OSError, zipfile.BadZipFile) as e:
                raise ExtractionFailure(str(self.archive_path), str(e))
        return self._zip

    def extract(self, member: str) -> bytes:
        archive = self._open()
        try:
            return archive.read(member)
        except KeyError:
            raise ExtractionFailure(member, f"filename not matched in {self.archive_path}")
        except (OSError, zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError) as e:
            # RuntimeError: encrypted member; NotImplementedError: unsupported compression
            raise ExtractionFailure(member, str(e))

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None


@dataclass
class SourceStats:
    cache_hits: int = 0
    file_reads: int = 0
    extractions: int = 0
    misses: int = 0


class RecordSource:
    """
    Resolve ORCID iDs to raw record bytes, at most once per iD.

    Args:
        cache: Resolution cache, identifier -> record text or None.
        data_dir: Root of the extracted summaries tree, if any.
        extractor: Archive extractor used when the tree has no file.
        archive_prefix: Directory inside the archive holding the shards.
    """

    def __init__(
        self,
        cache: MutableMapping[str, Optional[str]],
        data_dir: Optional[str | Path] = None,
        extractor: Optional[ArchiveExtractor] = None,
        archive_prefix: str = DEFAULT_ARCHIVE_PREFIX,
    ):
        self.cache = cache
        self.data_dir = Path(data_dir) if data_dir else None
        self.extractor = extractor
        self.archive_prefix = archive_prefix.strip("/")
        self.stats = SourceStats()

    def resolve(self, identifier: str) -> Optional[bytes]:
        """Return the record bytes for ``identifier``, or None if it has none."""
        if identifier in self.cache:
            self.stats.cache_hits += 1
            text = self.cache[identifier]
            return text.encode("utf-8") if text is not None else None

        data = self._lookup(identifier)
        text = data.decode("utf-8", errors="replace") if data is not None else None
        self.cache[identifier] = text
        return text.encode("utf-8") if text is not None else None

    def close(self) -> None:
        """Release the archive extractor, if any."""
        if self.extractor is not None:
            self.extractor.close()

    def require(self, identifier: str) -> bytes:
        """Like :meth:`resolve` but raise :class:`MissingRecord` on a miss."""
        data = self.resolve(identifier)
        if data is None:
            raise MissingRecord(identifier)
        return data

    def _lookup(self, identifier: str) -> Optional[bytes]:
        relative = record_path(identifier)

        if self.data_dir is not None:
            path = self.data_dir / relative
            if path.is_file():
                try:
                    data = path.read_bytes()
                except OSError as e:
                    logger.warning(f"{identifier}: cannot read {path}: {e}")
                    self.stats.misses += 1
                    return None
                self.stats.file_reads += 1
                return data

        if self.extractor is None:
            logger.debug(f"{identifier}: not in data dir and no archive configured")
            self.stats.misses += 1
            return None

        member = f"{self.archive_prefix}/{relative}" if self.archive_prefix else relative
        try:
            data = self.extractor.extract(member)
        except ExtractionFailure as e:
            logger.warning(f"{identifier}: {e}")
            self.stats.misses += 1
            return None
        self.stats.extractions += 1
        return data
