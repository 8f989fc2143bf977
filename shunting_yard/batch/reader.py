"""Read expression files, plain or archived."""
from pathlib import Path
import tarfile
import tempfile
from typing import Callable, Iterable, List, Tuple
import zipfile

import py7zr


def _first_txt(names: Iterable[str], archive_kind: str) -> str:
    """
    Pick the first .txt entry among archive member names.

    :raises ValueError: If the archive holds no .txt file
    """
    for name in names:
        if name.endswith(".txt"):
            return name
    raise ValueError(f"📄❌ No .txt file found in {archive_kind} archive")


def _read_zip(path: Path) -> bytes:
    with zipfile.ZipFile(path, "r") as zf:
        return zf.read(_first_txt(zf.namelist(), "zip"))


def _read_tar_xz(path: Path) -> bytes:
    with tarfile.open(path, "r:xz") as tf:
        name = _first_txt((m.name for m in tf.getmembers() if m.isfile()), "tar.xz")
        return tf.extractfile(name).read()


def _read_7z(path: Path) -> bytes:
    # py7zr only extracts to disk
    with tempfile.TemporaryDirectory() as tmpdir, py7zr.SevenZipFile(path, mode="r") as archive:
        name = _first_txt(archive.getnames(), "7z")
        archive.extract(path=tmpdir, targets=[name])
        return (Path(tmpdir) / name).read_bytes()


# Suffix chains recognized as archives, matched against the end of the file name
ARCHIVE_READERS: Tuple[Tuple[Tuple[str, ...], Callable[[Path], bytes]], ...] = (
    ((".zip",), _read_zip),
    ((".tar", ".xz"), _read_tar_xz),
    ((".7z",), _read_7z),
)


def _load(path: Path) -> str:
    """
    Return the text of a .txt file, or of the first .txt member of a supported archive.

    :raises ValueError: If the archive format is unsupported or contains no .txt file
    """
    if path.suffix == ".txt":
        return path.read_text(encoding="utf-8")
    for suffixes, reader in ARCHIVE_READERS:
        if tuple(path.suffixes[-len(suffixes):]) == suffixes:
            return reader(path).decode("utf-8")
    raise ValueError(f"📄❌ Unsupported archive format: {''.join(path.suffixes) or path.name}")


def read_expressions(path: Path) -> List[Tuple[int, str]]:
    """
    Load expressions, one per line, from a text file or an archive holding one.

    Blank lines are skipped; line numbers refer to the source file.

    Supported formats:
    - .txt
    - .zip
    - .tar.xz
    - .7z

    :param Path path: Path to the input file

    :return: List of (line_number, expression) pairs
    :rtype: List[Tuple[int, str]]
    :raises ValueError: If the archive format is unsupported or contains no .txt file
    """
    content = _load(Path(path))
    return [
        (line_number, line.strip())
        for line_number, line in enumerate(content.splitlines(), start=1)
        if line.strip()
    ]
