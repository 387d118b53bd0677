"""Tests for counterparty name normalization."""

import pytest

from bank_statement_recon.normalization import (
    extract_tax_id,
    sanitize_name,
    title_case,
    to_comparable_form,
)

NAMES = [
    "ТОО Ромашка",
    '  ТОО  "РОМАШКА"\r\nПЛЮС ',
    "Товарище ство с ограничен ной ответствен ностью Ромашка",
    "ИП/Иванов//И.И.",
    "АО «Казахтелеком»",
    "иванов иван иванович",
    "ТОО 7 НЕБО",
    "",
]


class TestSanitizeName:
    def test_line_breaks_and_slashes(self):
        assert sanitize_name('ТОО "Ромашка"\r\nПлюс') == 'ТОО "Ромашка" Плюс'
        assert sanitize_name("ИП/Иванов//И.И.") == "ИП Иванов И.И."

    def test_rejoins_wrapped_legal_form_words(self):
        raw = "Товарище ство с ограничен ной ответствен ностью Ромашка"
        assert (
            sanitize_name(raw)
            == "Товарищество с ограниченной ответственностью Ромашка"
        )

    def test_rejoin_keeps_original_casing(self):
        assert sanitize_name("ТОВАРИЩЕ СТВО") == "ТОВАРИЩЕСТВО"

    def test_empty(self):
        assert sanitize_name("") == ""

    @pytest.mark.parametrize("raw", NAMES)
    def test_idempotent(self, raw):
        once = sanitize_name(raw)
        assert sanitize_name(once) == once

    @pytest.mark.parametrize("raw", NAMES)
    def test_never_longer_than_collapsed_input(self, raw):
        collapsed = " ".join(raw.split())
        assert len(sanitize_name(raw)) <= len(collapsed)


class TestExtractTaxId:
    def test_embedded_in_name(self):
        assert extract_tax_id("ТОО Ромашка 123456789012 Алматы") == "123456789012"

    def test_prefixed_by_letters(self):
        assert extract_tax_id("БИН123456789012") == "123456789012"

    def test_longer_digit_run_is_not_a_tax_id(self):
        assert extract_tax_id("1234567890123") == ""

    def test_shorter_digit_run_is_not_a_tax_id(self):
        assert extract_tax_id("ТОО 12345") == ""

    def test_first_wins(self):
        assert extract_tax_id("111111111111 и 222222222222") == "111111111111"


class TestComparableForm:
    def test_strips_legal_prefix_and_quotes(self):
        assert to_comparable_form("ТОО «Ромашка»") == "ромашка"
        assert to_comparable_form('ТОО "РОМАШКА"') == "ромашка"

    def test_yo_folded(self):
        assert to_comparable_form("Ёлка") == "елка"

    def test_prefix_stripped_only_as_whole_word(self):
        assert to_comparable_form("Каолин") == "каолин"
        assert to_comparable_form("ИП Ипатов") == "ипатов"

    def test_punctuation_removed(self):
        assert to_comparable_form("ТОО Ромашка-Плюс.") == "ромашкаплюс"

    def test_whitespace_collapsed(self):
        assert to_comparable_form("  Астана   Логистик  ") == "астана логистик"


class TestTitleCase:
    def test_legal_prefix_kept_upper(self):
        assert title_case("ТОО ЗЕЛЕНАЯ ДОЛИНА") == "ТОО Зеленая Долина"

    def test_short_acronyms_kept(self):
        assert title_case("ТОО КАЗМУНАЙ СНГ") == "ТОО Казмунай СНГ"

    def test_digit_words_kept(self):
        assert title_case("ТОО 7 НЕБО") == "ТОО 7 НЕБО"

    def test_lowercase_input(self):
        assert title_case("иванов иван") == "Иванов Иван"

    def test_blank_returned_as_is(self):
        assert title_case("   ") == "   "

    @pytest.mark.parametrize("raw", NAMES)
    def test_comparable_form_unchanged(self, raw):
        assert to_comparable_form(title_case(raw)) == to_comparable_form(raw)
