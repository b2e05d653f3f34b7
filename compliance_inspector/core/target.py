import fnmatch
import os
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union
from compliance_inspector.config.defaults import DEFAULT_IGNORED_DIRS, DEFAULT_MAX_FILE_BYTES
from compliance_inspector.exceptions import TargetNotFound
from compliance_inspector.utils.logger import get_logger

logger = get_logger()

ARCHIVE_SUFFIXES = (".zip", ".tar", ".tar.gz", ".tgz")


def match_glob(path: str, pattern: str) -> bool:
    """
    Match a posix relative path against a glob. A leading `**/` also matches
    files at the root, so `**/*.bicep` covers `main.bicep`.
    """
    if fnmatch.fnmatchcase(path, pattern):
        return True
    if pattern.startswith("**/"):
        return match_glob(path, pattern[3:])
    return False


def _is_ignored(rel_path: str, ignored_dirs: FrozenSet[str]) -> bool:
    return any(part in ignored_dirs for part in PurePosixPath(rel_path).parts[:-1])


def _decode(raw: bytes) -> Optional[str]:
    if b"\x00" in raw[:8192]:
        return None
    return raw.decode("utf-8", errors="replace")


class RepositoryTarget:
    """
    Read-only, in-memory view of a repository's text files.

    Built from a directory or an archive; every file is read once when the
    target is opened, so rules can evaluate it concurrently without locking.
    """

    def __init__(self, name: str, files: Dict[str, str], skipped: int = 0):
        self.name = name
        self._files = dict(sorted(files.items()))
        self.skipped = skipped

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        ignored_dirs: Iterable[str] = DEFAULT_IGNORED_DIRS,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    ) -> "RepositoryTarget":
        path = Path(path)
        ignored = frozenset(ignored_dirs)

        if not path.exists():
            raise TargetNotFound(path)

        try:
            if path.is_dir():
                files, skipped = cls._read_directory(path, ignored, max_file_bytes)
            elif path.name.lower().endswith(ARCHIVE_SUFFIXES):
                files, skipped = cls._read_archive(path, ignored, max_file_bytes)
            else:
                raise TargetNotFound(path, "is not a directory or supported archive")
        except TargetNotFound:
            raise
        except (OSError, zipfile.BadZipFile, tarfile.TarError) as ex:
            raise TargetNotFound(path, f"could not be read: {ex}") from ex

        logger.info(f"[Target] Loaded {len(files)} files from {path} ({skipped} skipped)")
        return cls(name=str(path), files=files, skipped=skipped)

    @staticmethod
    def _read_directory(root: Path, ignored: FrozenSet[str], max_bytes: int) -> Tuple[Dict[str, str], int]:
        files: Dict[str, str] = {}
        skipped = 0
        # rglob swallows PermissionError, so an unreadable root must fail here
        with os.scandir(root):
            pass
        for file in root.rglob("*"):
            if not file.is_file():
                continue
            rel = file.relative_to(root).as_posix()
            if _is_ignored(rel, ignored):
                continue
            try:
                if file.stat().st_size > max_bytes:
                    logger.debug(f"[Target] Skipping large file: {rel}")
                    skipped += 1
                    continue
                raw = file.read_bytes()
            except OSError as ex:
                logger.warning(f"[Target] Failed to read {rel}: {ex}")
                skipped += 1
                continue
            text = _decode(raw)
            if text is None:
                skipped += 1
                continue
            files[rel] = text
        return files, skipped

    @staticmethod
    def _read_archive(archive: Path, ignored: FrozenSet[str], max_bytes: int) -> Tuple[Dict[str, str], int]:
        files: Dict[str, str] = {}
        skipped = 0

        if archive.name.lower().endswith(".zip"):
            with zipfile.ZipFile(archive) as zf:
                for info in zf.infolist():
                    if info.is_dir():
                        continue
                    skipped += RepositoryTarget._add_member(
                        files, info.filename, info.file_size,
                        lambda i=info: zf.read(i), ignored, max_bytes
                    )
        else:
            with tarfile.open(archive, "r:*") as tf:
                for member in tf.getmembers():
                    if not member.isfile():
                        continue
                    skipped += RepositoryTarget._add_member(
                        files, member.name, member.size,
                        lambda m=member: tf.extractfile(m).read(), ignored, max_bytes
                    )
        return files, skipped

    @staticmethod
    def _add_member(files: Dict[str, str], name: str, size: int, read, ignored: FrozenSet[str], max_bytes: int) -> int:
        rel = PurePosixPath(name).as_posix()
        while rel.startswith("./"):
            rel = rel[2:]
        if not rel or rel == "." or rel.startswith("/") or _is_ignored(rel, ignored):
            return 0
        if size > max_bytes:
            return 1
        text = _decode(read())
        if text is None:
            return 1
        files[rel] = text
        return 0

    # ─── Read API ──────────────────────────────────────
    def list_files(self) -> List[str]:
        return list(self._files)

    def has_file(self, rel_path: str) -> bool:
        return rel_path in self._files

    def read_text(self, rel_path: str) -> str:
        return self._files[rel_path]

    def read_lines(self, rel_path: str) -> List[str]:
        return self._files[rel_path].splitlines()

    def glob(self, patterns: Iterable[str], exclude: Iterable[str] = ()) -> List[str]:
        patterns = list(patterns)
        exclude = list(exclude)
        return [
            p for p in self._files
            if any(match_glob(p, pat) for pat in patterns)
            and not any(match_glob(p, ex) for ex in exclude)
        ]

    def __len__(self) -> int:
        return len(self._files)
