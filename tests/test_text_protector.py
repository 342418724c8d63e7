# SPDX-License-Identifier: Apache-2.0
"""Tests for the placeholder codec."""

from __future__ import annotations

import logging

import pytest

from subtitle_translator.core.text_protector import (
    PLACEHOLDER_PATTERN,
    Placeholder,
    TextProtector,
    make_token,
)


@pytest.fixture
def protector() -> TextProtector:
    return TextProtector()


class TestMakeToken:
    def test_indexed(self) -> None:
        assert make_token("ITALIC_O", 0) == "⟦ITALIC_O_0⟧"

    def test_singleton(self) -> None:
        assert make_token("MUSIC") == "⟦MUSIC⟧"

    def test_tokens_match_pattern(self) -> None:
        assert PLACEHOLDER_PATTERN.fullmatch(make_token("GLOSS", 12))
        assert PLACEHOLDER_PATTERN.fullmatch(make_token("NL"))


class TestProtect:
    """Tests for TextProtector.protect."""

    def test_plain_text_unchanged(self, protector: TextProtector) -> None:
        protected = protector.protect("Hello world")
        assert protected.text == "Hello world"
        assert protected.placeholders == []

    def test_empty_text(self, protector: TextProtector) -> None:
        protected = protector.protect("")
        assert protected.text == ""
        assert protected.placeholders == []

    def test_single_tag_pair(self, protector: TextProtector) -> None:
        protected = protector.protect("<i>Hello</i> World")
        assert protected.text == "⟦ITALIC_O_0⟧Hello⟦ITALIC_C_0⟧ World"
        assert [p.kind for p in protected.placeholders] == ["ITALIC_O", "ITALIC_C"]

    def test_indices_are_per_kind(self, protector: TextProtector) -> None:
        protected = protector.protect("<b>a</b> <i>b</i> <b>c</b>")
        assert protected.text == (
            "⟦BOLD_O_0⟧a⟦BOLD_C_0⟧ ⟦ITALIC_O_0⟧b⟦ITALIC_C_0⟧ ⟦BOLD_O_1⟧c⟦BOLD_C_1⟧"
        )
        assert protected.count("BOLD_O") == 2
        assert protected.count("ITALIC_O") == 1

    def test_tags_are_case_insensitive(self, protector: TextProtector) -> None:
        protected = protector.protect("<I>Loud</I>")
        assert protected.text == "⟦ITALIC_O_0⟧Loud⟦ITALIC_C_0⟧"
        assert protected.placeholders[0].replacement == "<I>"

    def test_font_tag_with_attributes(self, protector: TextProtector) -> None:
        protected = protector.protect('<font color="#ff0000">Red</font>')
        assert protected.text == "⟦FONT_O_0⟧Red⟦FONT_C_0⟧"
        assert protected.placeholders[0].replacement == '<font color="#ff0000">'

    def test_ass_override_block(self, protector: TextProtector) -> None:
        protected = protector.protect(r"{\an8}Top line")
        assert protected.text == "⟦ASS_0⟧Top line"

    def test_music_markers(self, protector: TextProtector) -> None:
        protected = protector.protect("♪ La la ♫")
        assert protected.text == "⟦MUSIC_0⟧ La la ⟦MUSIC_1⟧"

    def test_newline_absorbs_surrounding_blanks(self, protector: TextProtector) -> None:
        protected = protector.protect("First line  \n\tSecond line")
        assert protected.text == "First line⟦NL_0⟧Second line"
        assert protected.placeholders[0].replacement == "  \n\t"

    def test_crlf_newline(self, protector: TextProtector) -> None:
        protected = protector.protect("One\r\nTwo")
        assert protected.text == "One⟦NL_0⟧Two"

    def test_token_shaped_text_is_protected(self, protector: TextProtector) -> None:
        protected = protector.protect("see ⟦ITALIC_O_0⟧ and <i>x</i>")
        assert protected.text == "see ⟦LITERAL_0⟧ and ⟦ITALIC_O_0⟧x⟦ITALIC_C_0⟧"
        assert protected.placeholders[0] == Placeholder(
            "LITERAL", "⟦LITERAL_0⟧", "⟦ITALIC_O_0⟧"
        )


class TestRestore:
    """Tests for TextProtector.restore."""

    @pytest.mark.parametrize(
        "text",
        [
            "Hello",
            "<i>Hello</i> World",
            "<b>Bold</b> and <u>under</u>\n<i>next line</i>",
            '{\\pos(10,20)}<font face="Arial">♪ Sing ♪</font>',
            "Line one \n Line two\r\nLine three",
            "<I>Mixed</i> <B>case</b>",
            "see ⟦ITALIC_O_0⟧ and <i>x</i>",
            "⟦X⟧ ⟦LITERAL_0⟧\n⟦NL_0⟧",
        ],
    )
    def test_identity_round_trip(self, protector: TextProtector, text: str) -> None:
        protected = protector.protect(text)
        assert protector.restore(protected.text, protected.placeholders) == text

    def test_restores_reordered_tokens(self, protector: TextProtector) -> None:
        protected = protector.protect("<i>Hello</i> World")
        translated = "⟦ITALIC_O_0⟧Hallo⟦ITALIC_C_0⟧ Welt"
        assert protector.restore(translated, protected.placeholders) == "<i>Hallo</i> Welt"

    def test_restores_moved_tokens(self, protector: TextProtector) -> None:
        protected = protector.protect("<b>red</b> car")
        translated = "voiture ⟦BOLD_O_0⟧rouge⟦BOLD_C_0⟧"
        assert protector.restore(translated, protected.placeholders) == "voiture <b>rouge</b>"

    def test_newline_tolerates_inserted_spaces(self, protector: TextProtector) -> None:
        protected = protector.protect("Hello\nWorld")
        translated = "Hallo ⟦NL_0⟧ Welt"
        assert protector.restore(translated, protected.placeholders) == "Hallo\nWelt"

    def test_missing_token_is_logged(
        self, protector: TextProtector, caplog: pytest.LogCaptureFixture
    ) -> None:
        protected = protector.protect("<i>Hello</i>")
        with caplog.at_level(logging.WARNING):
            result = protector.restore("Hallo⟦ITALIC_C_0⟧", protected.placeholders)
        assert result == "Hallo</i>"
        assert "missing" in caplog.text

    def test_duplicated_token_kept_verbatim(
        self, protector: TextProtector, caplog: pytest.LogCaptureFixture
    ) -> None:
        placeholders = [Placeholder("MUSIC", "⟦MUSIC_0⟧", "♪")]
        with caplog.at_level(logging.WARNING):
            result = protector.restore("⟦MUSIC_0⟧ la ⟦MUSIC_0⟧", placeholders)
        assert result == "♪ la ⟦MUSIC_0⟧"
        assert "duplicated" in caplog.text

    def test_replacement_with_backslashes(self, protector: TextProtector) -> None:
        protected = protector.protect(r"{\fs20\b1}Big")
        assert protector.restore(protected.text, protected.placeholders) == r"{\fs20\b1}Big"

    def test_no_placeholders(self, protector: TextProtector) -> None:
        assert protector.restore("Hallo", []) == "Hallo"

    def test_restored_spans_are_not_rescanned(self, protector: TextProtector) -> None:
        placeholders = [
            Placeholder("LITERAL", "⟦LITERAL_0⟧", "⟦BOLD_O_0⟧"),
            Placeholder("BOLD_O", "⟦BOLD_O_0⟧", "<b>"),
        ]
        result = protector.restore("⟦BOLD_O_0⟧a ⟦LITERAL_0⟧", placeholders)
        assert result == "<b>a ⟦BOLD_O_0⟧"
