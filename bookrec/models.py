from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class Recommendation(BaseModel):
    genre: str
    mood: str
    level: str
    text: str
    timestamp: str


class Selection(BaseModel):
    genre: str = ""
    mood: str = ""
    level: str = ""

    def is_complete(self) -> bool:
        return bool(self.genre and self.mood and self.level)


class SelectionUpdate(BaseModel):
    genre: Optional[str] = None
    mood: Optional[str] = None
    level: Optional[str] = None


class SessionState(BaseModel):
    selection: Selection
    available_moods: List[str] = Field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    can_submit: bool = False
    recommendations: List[Recommendation] = Field(default_factory=list)


class Options(BaseModel):
    genres: List[str]
    levels: List[str]
    moods: Dict[str, List[str]]
