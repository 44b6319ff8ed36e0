#!filepath: model_compare/utils/filesystem.py
from pathlib import Path

from model_compare.utils.logger import logs


class FileSystem:
    """
    Report-side filesystem helpers
    - create run directories
    - atomic writes (tmp file -> rename), so a half-written CSV never
      shows up under its final name
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] created dir: {p}")
        return p

    @staticmethod
    def safe_write(path: str | Path, data: bytes) -> None:
        path = Path(path)
        FileSystem.ensure_dir(path.parent)

        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
        logs.debug(f"[FS] wrote {path.name} ({len(data)} bytes)")
