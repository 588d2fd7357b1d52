import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
GENRES_FILE = DATA_DIR / "genre.json"
MOODS_FILE = DATA_DIR / "mood.json"

LEVELS = ["Beginner", "Intermediate", "Expert"]


class CatalogError(RuntimeError):
    pass


def load_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CatalogError(f"Could not read option file {path.name}: {e}") from e


@lru_cache(maxsize=1)
def load_genres() -> List[str]:
    data = load_json(GENRES_FILE)
    if not isinstance(data, list) or not all(isinstance(g, str) for g in data):
        raise CatalogError(f"{GENRES_FILE.name} must be a list of strings")
    logger.debug("Loaded %d genres", len(data))
    return data


@lru_cache(maxsize=1)
def load_moods() -> Dict[str, List[str]]:
    data = load_json(MOODS_FILE)
    if not isinstance(data, dict):
        raise CatalogError(f"{MOODS_FILE.name} must map genres to mood lists")
    for genre, moods in data.items():
        if not isinstance(moods, list) or not all(isinstance(m, str) for m in moods):
            raise CatalogError(f"Moods for genre {genre!r} must be a list of strings")
    return data


def moods_for(genre: str) -> List[str]:
    """Moods offered for ``genre``; empty when no genre (or an unknown one) is selected."""
    if not genre:
        return []
    return list(load_moods().get(genre, []))


def levels() -> List[str]:
    return list(LEVELS)
