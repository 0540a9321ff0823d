"""Tests for the per-keystroke jump cycle."""

from __future__ import annotations

import pytest
from conftest import LOWER_ALPHABET, FixedAlphabet, RecordingJumper, make_context

from tagjump.services.jump_session import JumpOutcome, JumpSession
from tagjump.services.jump_types import ViewBounds, normalize_query
from tagjump.services.occurrence_search import find_occurrences
from tagjump.services.selection_matcher import solves
from tagjump.services.tag_alphabet import TagAlphabet
from tagjump.services.tag_store import TagStore

TWO_E = "e_________e_________"


def _session(text, jumper, renderer=None, scroller=None, alphabet=None, **view):
    context = make_context(text, **view)
    return JumpSession(
        alphabet=alphabet or TagAlphabet(LOWER_ALPHABET),
        context_provider=lambda: context,
        jumper=jumper,
        renderer=renderer,
        scroller=scroller,
    )


def _type(session, text, typed, *, regex=False):
    return session.update(typed, find_occurrences(text, typed, regex=regex), regex=regex)


class TestNormalizeQuery:
    def test_literal_keeps_first_character_case(self):
        assert normalize_query("HeLLo") == "Hello"

    def test_regex_gets_marker(self):
        assert normalize_query("\\D+", regex=True) == " \\D+"

    def test_empty(self):
        assert normalize_query("") == ""

    def test_empty_regex_has_no_marker(self):
        assert normalize_query("", regex=True) == ""


class TestUpdate:
    def test_markers_for_first_query(self, jumper, renderer):
        session = _session(TWO_E, jumper, renderer)
        outcome = _type(session, TWO_E, "e")
        assert not outcome.jumped
        assert [(m.tag, m.offset) for m in outcome.markers] == [("a", 0), ("b", 10)]
        assert dict(session.store.assignment) == {"a": 0, "b": 10}
        assert session.store.complete
        assert renderer.shown[-1] == outcome.markers

    def test_typing_a_tag_jumps_and_resets(self, jumper, renderer):
        session = _session(TWO_E, jumper, renderer)
        _type(session, TWO_E, "e")
        outcome = _type(session, TWO_E, "ea")
        assert outcome == JumpOutcome(jumped=True, offset=0)
        assert jumper.offsets == [0]
        assert session.store.snapshot() == TagStore().snapshot()
        assert renderer.cleared >= 1

    def test_refused_jump_keeps_session(self, renderer):
        refusing = RecordingJumper(accept=False)
        session = _session(TWO_E, refusing, renderer)
        _type(session, TWO_E, "e")
        outcome = _type(session, TWO_E, "eb")
        assert not outcome.jumped
        assert refusing.offsets == [10]
        assert session.store.query == "eb"

    def test_empty_query_clears(self, jumper, renderer):
        session = _session(TWO_E, jumper, renderer)
        _type(session, TWO_E, "e")
        outcome = session.update("", [])
        assert outcome == JumpOutcome()
        assert dict(session.store.assignment) == {}
        assert renderer.cleared == 1

    def test_empty_regex_query_clears_and_forgets_tags(self, jumper, renderer):
        text = "a1 b22 c333 x9"
        session = _session(text, jumper, renderer)
        outcome = _type(session, text, "\\d", regex=True)
        assert dict(session.store.assignment)

        outcome = session.update("", [], regex=True)
        assert outcome == JumpOutcome()
        assert dict(session.store.assignment) == {}
        assert session.store.query == ""
        assert renderer.cleared == 1

        outcome = _type(session, text, "a", regex=True)
        assert not outcome.jumped
        assert jumper.offsets == []

    def test_no_matches_no_markers(self, jumper):
        session = _session(TWO_E, jumper)
        outcome = _type(session, TWO_E, "q")
        assert outcome.markers == ()
        assert outcome.complete

    def test_incomplete_when_tags_run_out(self, jumper):
        text = "e_________" * 5
        session = _session(text, jumper, alphabet=FixedAlphabet(["a", "b"]))
        outcome = _type(session, text, "e")
        assert not outcome.complete
        assert not session.store.complete
        assert len(outcome.markers) == 2

    def test_regex_flag_is_sticky(self, jumper):
        text = "a1 b22 c333"
        session = _session(text, jumper)
        _type(session, text, "\\d+", regex=True)
        assert session.store.regex
        session.update("\\d", find_occurrences(text, "\\d", regex=True))
        assert session.store.regex
        assert session.store.query == " \\d"

    def test_regex_markers_cover_all_visible_matches(self, jumper):
        text = "a1 b22 c333"
        session = _session(text, jumper)
        outcome = _type(session, text, "\\d+", regex=True)
        assert sorted(m.offset for m in outcome.markers) == [1, 4, 8]
        assert outcome.complete

    def test_reset_is_idempotent(self, jumper, renderer):
        session = _session(TWO_E, jumper, renderer)
        _type(session, TWO_E, "e")
        session.reset()
        first = session.store.snapshot()
        session.reset()
        assert session.store.snapshot() == first == TagStore().snapshot()


class TestScrolling:
    TEXT = "." * 100 + "ab" + "." * 20

    def test_scrolls_when_no_marker_is_visible(self, jumper, scroller):
        session = _session(self.TEXT, jumper, scroller=scroller, first=0, last=9)
        outcome = _type(session, self.TEXT, "ab")
        assert outcome.scrolled
        assert scroller.queries == ["ab"]

    def test_single_character_query_does_not_scroll(self, jumper, scroller):
        session = _session(self.TEXT, jumper, scroller=scroller, first=0, last=9)
        outcome = _type(session, self.TEXT, "a")
        assert outcome.markers
        assert not outcome.scrolled
        assert scroller.queries == []

    def test_visible_marker_does_not_scroll(self, jumper, scroller):
        session = _session(self.TEXT, jumper, scroller=scroller)
        outcome = _type(session, self.TEXT, "ab")
        assert not outcome.scrolled


class TestNearest:
    def test_jump_to_nearest_visible(self, jumper):
        session = _session(TWO_E, jumper)
        _type(session, TWO_E, "e")
        assert session.jump_to_nearest_visible()
        assert jumper.offsets == [10]
        assert dict(session.store.assignment) == {}

    def test_nothing_to_jump_to(self, jumper):
        session = _session(TWO_E, jumper)
        assert not session.jump_to_nearest_visible()
        assert jumper.offsets == []

    def test_match_between_views_uses_refined_matches(self, jumper):
        text = "e_________" * 20
        session = _session(text, jumper, first=0, last=49)
        _type(session, text, "e")
        assert session.has_match_between_old_and_new_view(ViewBounds(0, 49), ViewBounds(100, 149))
        assert not session.has_match_between_old_and_new_view(ViewBounds(0, 49), ViewBounds(1, 50))


PROSE = (
    "the quick brown fox jumps over the lazy dog\n"
    "then the other fox thought that the tale was there\n"
) * 3


def _solving_tags(session, typed):
    query = normalize_query(typed)
    return [
        tag
        for tag, offset in session.store.assignment.items()
        if solves(tag, offset, query, PROSE)
    ]


@pytest.mark.parametrize("sequence", ["the", "fox", "tha", "o"])
def test_at_most_one_tag_solves_any_next_keystroke(jumper, sequence):
    session = _session(PROSE, jumper, first=0, last=60)
    keys = sorted(set(PROSE.lower()) | set(TagAlphabet().characters))
    typed = ""
    for ch in sequence:
        typed += ch
        outcome = _type(session, PROSE, typed)
        if outcome.jumped:
            break
        assignment = session.store.assignment
        offsets = list(assignment.values())
        assert len(offsets) == len(set(offsets))
        assert not any(a != b and b.startswith(a) for a in assignment for b in assignment)
        for key in keys:
            assert len(_solving_tags(session, typed + key)) <= 1
