import logging
from datetime import datetime
from typing import List, Optional

from .catalog import moods_for
from .client import GeminiClient, GeminiError, GeminiResponseError
from .models import Recommendation, Selection, SelectionUpdate, SessionState

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Please select all fields"
TIMESTAMP_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


class RequestInProgress(RuntimeError):
    pass


def build_prompt(genre: str, mood: str, level: str, count: int = 6) -> str:
    return (
        f"Recommend {count} {genre} books for a {level} reader feeling {mood}. For each book, provide:\n"
        "- Title and author\n"
        "- A short description\n"
        f"- Why it suits a {level} reader who is feeling {mood}\n"
    )


class RecommendationSession:
    """Selections, history and the loading/error flags for one page session."""

    def __init__(self, books_per_request: int = 6):
        self.selection = Selection()
        self.recommendations: List[Recommendation] = []
        self.loading = False
        self.error: Optional[str] = None
        self.books_per_request = books_per_request

    def select_genre(self, genre: str) -> None:
        self.selection.genre = genre
        # mood lists are per genre
        self.selection.mood = ""

    def select_mood(self, mood: str) -> None:
        self.selection.mood = mood

    def select_level(self, level: str) -> None:
        self.selection.level = level

    def apply(self, update: SelectionUpdate) -> None:
        if update.genre is not None:
            self.select_genre(update.genre)
        if update.mood is not None:
            self.select_mood(update.mood)
        if update.level is not None:
            self.select_level(update.level)

    @property
    def available_moods(self) -> List[str]:
        return moods_for(self.selection.genre)

    @property
    def can_submit(self) -> bool:
        return not self.loading and self.selection.is_complete()

    async def fetch_recommendations(self, client: GeminiClient) -> Optional[Recommendation]:
        """Ask the API for books matching the current selections.

        Returns the appended Recommendation, or None when the attempt failed;
        in that case ``error`` holds the message to show.
        """
        if not self.selection.is_complete():
            self.error = MISSING_FIELDS
            return None
        if self.loading:
            raise RequestInProgress("A recommendation request is already in progress")

        genre, mood, level = self.selection.genre, self.selection.mood, self.selection.level
        self.loading = True
        self.error = None
        try:
            text = await client.generate(build_prompt(genre, mood, level, self.books_per_request))
        except GeminiResponseError as e:
            self.error = str(e)
            return None
        except GeminiError as e:
            logger.error("Fetch error: %s", e)
            self.error = f"Failed to fetch recommendations: {e}"
            return None
        finally:
            self.loading = False

        recommendation = Recommendation(
            genre=genre,
            mood=mood,
            level=level,
            text=text,
            timestamp=datetime.now().strftime(TIMESTAMP_FORMAT),
        )
        self.recommendations.append(recommendation)
        logger.info("Recommendation %d added: %s (%s), %s level", len(self.recommendations), genre, mood, level)
        return recommendation

    def snapshot(self) -> SessionState:
        return SessionState(
            selection=self.selection.model_copy(),
            available_moods=self.available_moods,
            loading=self.loading,
            error=self.error,
            can_submit=self.can_submit,
            recommendations=list(self.recommendations),
        )
