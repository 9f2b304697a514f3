#!filepath: dispbdt/utils/filesystem.py
from pathlib import Path
from typing import List, Optional

from dispbdt import logs


class FileSystem:
    """
    File system helpers
    - create directories on demand
    - atomic writes (tmp file -> rename)
    - newline-delimited list files
    - directory scans
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] created directory: {p}")
        return p

    @staticmethod
    def get_file_size(path: str | Path) -> int:
        p = Path(path)
        if not p.exists():
            return 0
        return p.stat().st_size

    @staticmethod
    def format_size(size_bytes: int) -> str:
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size_bytes < 1024:
                return f"{size_bytes:.2f} {unit}"
            size_bytes /= 1024
        return f"{size_bytes:.2f} PB"

    @staticmethod
    def read_lines(path: str | Path) -> List[str]:
        """
        Read a newline-delimited list file.

        - surrounding whitespace stripped
        - blank lines skipped
        - raises FileNotFoundError / OSError when the file cannot be opened
        """
        p = Path(path)
        with open(p, "r", encoding="utf-8") as f:
            lines = [line.strip() for line in f]

        return [line for line in lines if line]

    @staticmethod
    def safe_write(path: str | Path, data: bytes) -> None:
        """
        Atomic write:
            1) write to <name>.tmp
            2) rename -> final path
        """
        path = Path(path)
        FileSystem.ensure_dir(path.parent)

        tmp_path = path.with_suffix(path.suffix + ".tmp")

        with open(tmp_path, "wb") as f:
            f.write(data)
            logs.debug(f"[FS] wrote tmp file: {tmp_path}")

        tmp_path.replace(path)
        logs.debug(f"[FS] atomic write done: {path}")

    @staticmethod
    def scan_dir(path: str | Path, suffix: Optional[str] = None) -> List[Path]:
        """
        Files directly under path (optionally filtered by suffix), sorted.
        """
        p = Path(path)
        if not p.exists():
            return []

        files = []
        for f in p.iterdir():
            if f.is_file():
                if suffix is None or f.suffix == suffix:
                    files.append(f)

        return sorted(files)
