# vierwandt/schema.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ───────── Corpus records ─────────
class Group(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    words: Tuple[str, ...]

class PuzzleRecord(BaseModel):
    """One day's puzzle. `fixed_positions` keeps the key order of the source file."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[Union[int, str]] = None
    author: Optional[str] = None
    groups: Tuple[Group, ...]
    # any value; assemble_grid skips entries that are not puzzle words
    fixed_positions: Dict[str, Any] = Field(default_factory=dict, alias="fixedPositions")

    @field_validator("author", mode="before")
    @classmethod
    def loose_author(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v) if isinstance(v, (int, float)) else None

    @field_validator("fixed_positions", mode="before")
    @classmethod
    def loose_fixed(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    def all_words(self) -> List[str]:
        return [w for g in self.groups for w in g.words]

    @property
    def label(self) -> str:
        return str(self.id) if self.id is not None else "unknown"

# ───────── API payloads ─────────
class WordsOut(BaseModel):
    words: List[str]
    author: str

class GroupsOut(BaseModel):
    groups: List[Group]

class CheckIn(BaseModel):
    # validated by hand so a bad value maps to 400 {error}
    selectedWords: Any = None

class CheckOut(BaseModel):
    correct: bool
    category: Optional[str] = None

class SubmissionIn(BaseModel):
    # checked in relay() so every bad value answers in the submission shape
    author: Any = None
    category: Any = None
    words: Any = None

class SubmissionOut(BaseModel):
    success: bool
    message: str

class ErrorOut(BaseModel):
    error: str

class Health(BaseModel):
    ok: bool = True
    puzzles: int
