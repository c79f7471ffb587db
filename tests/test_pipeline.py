"""End-to-end tests for ContextPipeline: parse, stages in order, serialize."""

import pytest

from lorelink.context.parser import parse_context
from lorelink.modules import Module, get_default_modules
from lorelink.pipeline import ContextPipeline, build_default_pipeline
from lorelink.schemas import ModuleConfig, SectionName, StoryCard, TreeCardsConfig


TEXT = (
    "You are a narrator.\n\n"
    "World Lore:\nSari is a young [[Fox]] scout.\n\n"
    "Recent Story:\nSari waits by the river.\n\n"
    "[Author's note: Keep it tense.]\n\n"
    "Continue From:\nA twig snaps."
)

ENABLED = "--- Tree Cards ---\nEnable: true\n\n--- Section Injection ---\nEnable: true"


def _cards():
    return [
        StoryCard(id="1", title="Sari", entry="Sari is a young [[Fox]] scout."),
        StoryCard(id="2", title="Fox", entry="Foxes are clever [[Wolves]] rivals."),
        StoryCard(
            id="3",
            title="Wolves",
            entry='Wolves roam the northern woods. <inject section="Memories" />',
        ),
    ]


class TestContextPipeline:

    def test_empty_text_returned_untouched(self):
        result = build_default_pipeline().run("")
        assert result.text == ""
        assert result.context is None
        assert result.pass_id

    def test_all_disabled_round_trips(self):
        result = build_default_pipeline().run(TEXT, _cards(), max_chars=10000)
        assert result.text == TEXT
        assert [c.id for c in result.context.world_lore_cards] == ["1"]

    def test_tree_cards_then_section_injection(self):
        result = build_default_pipeline().run(TEXT, _cards(), max_chars=10000, config_text=ENABLED)
        ctx = result.context
        assert ctx.sections[SectionName.WORLD_LORE].body == (
            "Sari is a young Fox scout.\n\nFoxes are clever Wolves rivals."
        )
        assert ctx.sections[SectionName.MEMORIES].body == "Wolves roam the northern woods."
        assert [c.id for c in ctx.world_lore_cards] == ["1", "2"]
        assert result.text.startswith("You are a narrator.\n\nWorld Lore:\nSari is a young Fox scout.")
        assert "Memories:\nWolves roam the northern woods." in result.text
        assert result.text.endswith("Continue From:\nA twig snaps.")

    def test_output_never_exceeds_max_chars(self):
        max_chars = len(TEXT) + 40
        result = build_default_pipeline().run(TEXT, _cards(), max_chars=max_chars, config_text=ENABLED)
        assert len(result.text) <= max_chars

    def test_markdown_output(self):
        config = "--- Context ---\nEnable: true\nHeaderFormat: markdown\nAuthorsNoteFormat: markdown"
        result = build_default_pipeline().run(TEXT, _cards(), config_text=config)
        assert "## World Lore\n" in result.text
        assert "### Author's Note:\nKeep it tense." in result.text
        assert result.text.endswith("## Continue From:\nA twig snaps.")

    def test_deepest_markdown_level_output_reparses(self):
        config = (
            "--- Context ---\nEnable: true\nHeaderFormat: markdown\n"
            "MarkdownLevel: ####\nAuthorsNoteFormat: markdown"
        )
        result = build_default_pipeline().run(TEXT, _cards(), config_text=config)
        assert "#### Author's Note:\nKeep it tense." in result.text
        again = parse_context(result.text)
        assert again.sections[SectionName.AUTHORS_NOTE].body.startswith("Keep it tense.")
        assert again.sections[SectionName.RECENT_STORY].body == "Sari waits by the river."

    def test_configs_override_config_text(self):
        pipeline = build_default_pipeline()
        configs = pipeline.load_config(ENABLED)
        configs["treeCards"] = TreeCardsConfig(enable=False)
        result = pipeline.run(TEXT, _cards(), max_chars=10000, config_text=ENABLED, configs=configs)
        assert [c.id for c in result.context.world_lore_cards] == ["1"]

    def test_load_config_defaults_disabled(self):
        configs = build_default_pipeline().load_config()
        assert not any(config.enable for config in configs.values())

    def test_custom_postamble_header(self):
        text = "Recent Story:\nNow.\n\n[Author's note: calm]\n\nNext:\nGo."
        result = build_default_pipeline(postamble_header="Next:").run(text)
        assert result.context.postamble == "Go."
        assert result.text == text

    def test_duplicate_module_rejected(self):
        pipeline = ContextPipeline(get_default_modules())
        with pytest.raises(ValueError):
            pipeline.register_module(get_default_modules()[0])

    def test_custom_module_stage_runs(self):
        def shout(ctx, config, hook):
            if not config.enable:
                return ctx
            return ctx.model_copy(update={"preamble": ctx.preamble.upper()})

        module = Module(
            name="shout",
            title="Shout",
            config_model=ModuleConfig,
            config_section="--- Shout ---\nEnable: true",
            on_context=shout,
        )
        pipeline = ContextPipeline([module])
        result = pipeline.run(TEXT, config_text="--- Shout ---\nEnable: true")
        assert result.text.startswith("YOU ARE A NARRATOR.")
        assert pipeline.run(TEXT).text == TEXT
