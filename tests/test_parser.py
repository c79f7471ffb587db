"""Tests for parse_context and find_matching_bracket.

Validates that the section parser correctly handles:
- All six canonical sections, preamble and postamble
- Duplicate headers, markdown headers, case variants
- Bracketed Author's Notes with nested brackets, unterminated brackets
- Derivation of world_lore_cards from the card pool
"""

from lorelink.context.parser import find_matching_bracket, parse_context
from lorelink.schemas import SectionName, StoryCard


FULL_CONTEXT = (
    "World Lore:\nLore body.\n\n"
    "Story Summary:\nSummary body.\n\n"
    "Memories:\nMemory body.\n\n"
    "Narrative Checklist:\n- find the key\n\n"
    "Recent Story:\nRecent body.\n\n"
    "[Author's note: Be vivid.]"
)


def _card(card_id, entry=None, title=None, keys=None):
    return StoryCard(id=card_id, entry=entry, title=title, keys=keys)


# ---------------------------------------------------------------------------
# Tests: sections
# ---------------------------------------------------------------------------

class TestParseSections:

    def test_parses_all_sections(self):
        ctx = parse_context(FULL_CONTEXT)
        assert list(ctx.sections) == [
            SectionName.WORLD_LORE,
            SectionName.STORY_SUMMARY,
            SectionName.MEMORIES,
            SectionName.NARRATIVE_CHECKLIST,
            SectionName.RECENT_STORY,
            SectionName.AUTHORS_NOTE,
        ]
        assert ctx.sections[SectionName.WORLD_LORE].body == "Lore body."
        assert ctx.sections[SectionName.NARRATIVE_CHECKLIST].body == "- find the key"
        assert ctx.sections[SectionName.AUTHORS_NOTE].body == "Be vivid."
        assert ctx.preamble == ""
        assert ctx.postamble == ""

    def test_preamble_before_first_header(self):
        ctx = parse_context("### Character\n\nYou are James.\n\nWorld Lore:\nA fox.")
        assert ctx.preamble == "### Character\n\nYou are James."
        assert ctx.sections[SectionName.WORLD_LORE].body == "A fox."

    def test_no_headers_is_all_preamble(self):
        ctx = parse_context("Just some text.\nNothing else.")
        assert ctx.preamble == "Just some text.\nNothing else."
        assert ctx.sections == {}
        assert ctx.postamble == ""

    def test_duplicate_sections_are_concatenated(self):
        text = "World Lore:\nFirst.\n\nRecent Story:\nNow.\n\nWorld Lore:\nSecond."
        ctx = parse_context(text)
        assert ctx.sections[SectionName.WORLD_LORE].body == "First.\n\nSecond."
        assert ctx.sections[SectionName.WORLD_LORE].header == "World Lore:"

    def test_markdown_headers(self):
        text = "## World Lore\nLore.\n\n#### Recent Story:\nStory.\n\n### Author's Note:\nNote."
        ctx = parse_context(text)
        assert ctx.sections[SectionName.WORLD_LORE].body == "Lore."
        assert ctx.sections[SectionName.RECENT_STORY].body == "Story."
        assert ctx.sections[SectionName.AUTHORS_NOTE].body == "Note."
        assert ctx.sections[SectionName.AUTHORS_NOTE].header == "### Author's Note:"
        # Markdown notes have no postamble
        assert ctx.postamble == ""

    def test_headers_are_case_insensitive(self):
        ctx = parse_context("world lore:\nLore.\n\nRECENT STORY:\nStory.")
        assert ctx.sections[SectionName.WORLD_LORE].body == "Lore."
        assert ctx.sections[SectionName.RECENT_STORY].body == "Story."

    def test_text_on_header_line_belongs_to_body(self):
        ctx = parse_context("Memories: I remember the sea.")
        assert ctx.sections[SectionName.MEMORIES].body == "I remember the sea."

    def test_header_word_inside_sentence_is_not_a_header(self):
        ctx = parse_context("World Lore:\nMemories of home are dim.")
        assert SectionName.MEMORIES not in ctx.sections
        assert ctx.sections[SectionName.WORLD_LORE].body == "Memories of home are dim."

    def test_header_not_at_line_start_is_ignored(self):
        ctx = parse_context("World Lore:\nShe said World Lore: is boring.")
        assert ctx.sections[SectionName.WORLD_LORE].body == "She said World Lore: is boring."


# ---------------------------------------------------------------------------
# Tests: Author's Note and postamble
# ---------------------------------------------------------------------------

class TestAuthorsNote:

    def test_bracket_note_with_trailing_text(self):
        ctx = parse_context("[Author's note: keep it dark] trailing text")
        assert ctx.sections[SectionName.AUTHORS_NOTE].body == "keep it dark"
        assert ctx.postamble == "trailing text"

    def test_note_variants(self):
        for header in ("[Authors Note:", "[author's note:", "[Author note:", "[AUTHOR'S NOTE:"):
            ctx = parse_context(f"{header} grim]")
            assert ctx.sections[SectionName.AUTHORS_NOTE].body == "grim", header

    def test_nested_brackets_do_not_close_note(self):
        text = "Recent Story:\nIt rains.\n\n[Author's note: use [bold] tone]\nAfter."
        ctx = parse_context(text)
        assert ctx.sections[SectionName.AUTHORS_NOTE].body == "use [bold] tone"
        assert ctx.postamble == "After."
        assert ctx.sections[SectionName.RECENT_STORY].body == "It rains."

    def test_multiline_note(self):
        text = "[Author's note: Writing Style: snappy.\nPerspective: Second Person.]"
        ctx = parse_context(text)
        assert ctx.sections[SectionName.AUTHORS_NOTE].body == (
            "Writing Style: snappy.\nPerspective: Second Person."
        )

    def test_unterminated_note_is_not_a_section(self):
        text = "Recent Story:\nIt rains.\n\n[Author's note: never closed"
        ctx = parse_context(text)
        assert SectionName.AUTHORS_NOTE not in ctx.sections
        assert ctx.postamble == ""
        assert ctx.sections[SectionName.RECENT_STORY].body == (
            "It rains.\n\n[Author's note: never closed"
        )

    def test_empty_postamble_when_nothing_follows(self):
        ctx = parse_context("Recent Story:\nNow.\n\n[Author's note: calm]")
        assert ctx.postamble == ""

    def test_continue_from_label_is_removed(self):
        ctx = parse_context("[Author's note: calm]\n\nContinue From:\nYou freeze mid-step.")
        assert ctx.postamble == "You freeze mid-step."

    def test_continue_from_label_with_text_on_same_line(self):
        ctx = parse_context("[Author's note: calm]\nContinue From: You freeze mid-step.")
        assert ctx.postamble == "You freeze mid-step."

    def test_headers_after_note_belong_to_postamble(self):
        ctx = parse_context("[Author's note: calm]\nRecent Story:\nLate text.")
        assert SectionName.RECENT_STORY not in ctx.sections
        assert ctx.postamble == "Recent Story:\nLate text."


# ---------------------------------------------------------------------------
# Tests: derived fields
# ---------------------------------------------------------------------------

class TestDerivedFields:

    def test_world_lore_cards_match_entries(self):
        cards = [
            _card("1", entry="Entry for card 1."),
            _card("2", entry="Entry for card 2."),
            _card("3", entry="Entry for card 3."),
            _card("4", entry=""),
        ]
        text = "World Lore:\nSome intro.\n\nEntry for card 1.\n\nEntry for card 3.\n\nRecent Story:\nEntry for card 2."
        ctx = parse_context(text, cards)
        assert [c.id for c in ctx.world_lore_cards] == ["1", "3"]

    def test_no_world_lore_means_no_cards(self):
        cards = [_card("1", entry="Anything.")]
        ctx = parse_context("Recent Story:\nAnything.", cards)
        assert ctx.world_lore_cards == ()

    def test_raw_and_max_chars_are_kept(self):
        ctx = parse_context(FULL_CONTEXT, [], 4000)
        assert ctx.raw == FULL_CONTEXT
        assert ctx.max_chars == 4000

    def test_max_chars_defaults_to_none(self):
        assert parse_context(FULL_CONTEXT).max_chars is None


class TestFindMatchingBracket:

    def test_nested(self):
        assert find_matching_bracket("[a [b] c] d", 0) == 8

    def test_unterminated(self):
        assert find_matching_bracket("[a [b] c", 0) == -1

    def test_starts_scanning_at_offset(self):
        assert find_matching_bracket("x] [y]", 3) == 5
