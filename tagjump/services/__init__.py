from .jump_session import JumpOutcome, JumpSession
from .jump_types import EditorContext, Marker, ViewBounds, normalize_query
from .tag_alphabet import DEFAULT_TAG_CHARACTERS, TagAlphabet
from .tag_store import TagStore

__all__ = [
    "DEFAULT_TAG_CHARACTERS",
    "EditorContext",
    "JumpOutcome",
    "JumpSession",
    "Marker",
    "TagAlphabet",
    "TagStore",
    "ViewBounds",
    "normalize_query",
]
