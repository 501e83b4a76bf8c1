from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RankingConfig:
    scoring_workers: int = int(os.getenv("MEDIASIM_SCORING_WORKERS", "1"))
    # Below this many candidates the scoring map always runs inline.
    parallel_min_candidates: int = 256


DEFAULT_RANKING_CONFIG = RankingConfig()
