"""Tag candidates derived from a configurable set of keyboard characters."""

from __future__ import annotations

DEFAULT_TAG_CHARACTERS = "asdfghjklqwertyuiopzxcvbnm"


class TagAlphabet:
    """Produces one- and two-character tags ordered by typing preference.

    Characters earlier in ``characters`` are preferred. Single-character tags
    come first, then pairs, with pairs built from preferred characters ahead
    of pairs that need a less convenient key.
    """

    def __init__(self, characters: str = DEFAULT_TAG_CHARACTERS) -> None:
        chars: list[str] = []
        for ch in str(characters or "").lower():
            if ch.isspace() or ch in chars:
                continue
            chars.append(ch)
        if not chars:
            chars = list(DEFAULT_TAG_CHARACTERS)
        self._characters = "".join(chars)
        self._rank = {ch: idx for idx, ch in enumerate(chars)}

        pairs = [a + b for a in chars for b in chars]
        pairs.sort(key=lambda tag: (max(self._rank[tag[0]], self._rank[tag[1]]), self._rank[tag[0]], self._rank[tag[1]]))
        self._tags: tuple[str, ...] = tuple(chars) + tuple(pairs)

    @property
    def characters(self) -> str:
        return self._characters

    @property
    def tags(self) -> tuple[str, ...]:
        return self._tags

    def filter_tags(self, query: str) -> list[str]:
        """Tags the user could still type after ``query`` without retyping it."""
        lowered = str(query or "").lower()
        if not lowered:
            return list(self._tags)
        return [tag for tag in self._tags if not lowered.endswith(tag[0]) and not lowered.endswith(tag)]

    def default_order(self, tag: str) -> tuple[int, ...]:
        """Sort key giving a total order over tags, shorter tags first."""
        return (len(tag), *(self._rank.get(ch, len(self._rank)) for ch in tag))
