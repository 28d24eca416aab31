from collections.abc import Iterable
from pathlib import Path

ALLOWED_EXTENSIONS = {".txt", ".md"}


def collect_files(root: str | Path) -> list[Path]:
    """Recursively collect `.txt`/`.md` files under `root`.

    Best effort: directories that cannot be listed (permissions, removed while
    walking) are skipped silently, as is a root that no longer exists.
    """
    results: list[Path] = []
    _walk(Path(root), results)
    return results


def _walk(current: Path, results: list[Path]):
    try:
        entries = sorted(current.iterdir(), key=lambda p: p.name)
    except OSError:
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            _walk(entry, results)
        elif entry.suffix.lower() in ALLOWED_EXTENSIONS:
            results.append(entry)


def collect_all_files(roots: Iterable[str | Path]) -> list[Path]:
    files: list[Path] = []
    for root in roots:
        files.extend(collect_files(root))
    return files


def resource_name(path: str | Path, roots: Iterable[str | Path]) -> str:
    """Human-friendly name: `<folder basename>/<path relative to folder>`."""
    path = Path(path)
    for root in roots:
        root = Path(root)
        if path.is_relative_to(root):
            return f"{root.name}/{path.relative_to(root).as_posix()}"
    return path.name


def mime_type(path: str | Path) -> str:
    if Path(path).suffix.lower() == ".md":
        return "text/markdown"
    return "text/plain"


def read_text(path: str | Path) -> str:
    return Path(path).read_text(encoding="utf-8")
