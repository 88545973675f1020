"""
Save directory discovery.

Steam cloud saves live under
``<Steam>/userdata/<account>/219990/remote/save/main/<character>/player.gdc``.
"""

import os
from pathlib import Path
from typing import Optional

GRIM_DAWN_APP_ID = "219990"
CHARACTER_FILE = "player.gdc"


def default_userdata_root() -> Path:
    """Steam userdata folder, from ``%ProgramFiles(x86)%``."""
    program_files = os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)")
    return Path(program_files) / "Steam" / "userdata"


def find_save_dirs(userdata_root: Optional[Path] = None) -> list[Path]:
    """Character directories that contain a player.gdc file."""
    root = Path(userdata_root) if userdata_root is not None else default_userdata_root()
    if not root.is_dir():
        return []

    save_dirs = []
    for account_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        main_dir = account_dir / GRIM_DAWN_APP_ID / "remote" / "save" / "main"
        if not main_dir.is_dir():
            continue
        for character_dir in sorted(p for p in main_dir.iterdir() if p.is_dir()):
            if (character_dir / CHARACTER_FILE).is_file():
                save_dirs.append(character_dir)
    return save_dirs
