from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_SAMPLE_DIR = Path(__file__).resolve().parent.parent / "data" / "sample"


@dataclass(frozen=True)
class LibraryConfig:
    """
    Location of the canonical library tables.
    """

    data_dir: Path = Path(os.getenv("MEDIASIM_DATA_DIR", str(_SAMPLE_DIR)))
    items_filename: str = "items.csv"
    people_filename: str = "people.csv"
    users_filename: str = "users.csv"
    user_data_filename: str = "user_data.csv"

    @property
    def items_path(self) -> Path:
        return self.data_dir / self.items_filename

    @property
    def people_path(self) -> Path:
        return self.data_dir / self.people_filename

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_filename

    @property
    def user_data_path(self) -> Path:
        return self.data_dir / self.user_data_filename


DEFAULT_LIBRARY_CONFIG = LibraryConfig()
