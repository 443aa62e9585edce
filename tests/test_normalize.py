from __future__ import annotations

"""Unit tests for field resolution and derivation heuristics.

These tests document the expected behavior of the approximate text rules used
by the normalizer. Each case focuses on one rule so regressions are easy to
diagnose.
"""

from card_listing.normalize import (
    IDENTITY_KEY_MAX_LENGTH,
    clean_text,
    infer_serial,
    infer_year,
    is_autograph,
    is_numbered,
    make_display_title,
    make_identity_key,
    normalize_record,
    resolve_field,
    slugify_identity,
)


def test_clean_text_collapses_whitespace() -> None:
    assert clean_text("  Topps \t Chrome  ") == "Topps Chrome"
    assert clean_text(None) == ""


def test_resolve_field_is_case_and_whitespace_insensitive() -> None:
    """The trailing-space `Team ` header still answers the team field."""
    record = {"Team ": "Real", "PLAYER NAME": "C. Ronaldo"}
    assert resolve_field(record, "team") == "Real"
    assert resolve_field(record, "player") == "C. Ronaldo"


def test_resolve_field_first_non_empty_alias_wins() -> None:
    """An empty earlier alias falls through to a later populated one."""
    record = {"Player Name": "", "Athlete": "Pelé"}
    assert resolve_field(record, "player") == "Pelé"


def test_resolve_field_missing_or_unknown_is_empty() -> None:
    assert resolve_field({"Other": "x"}, "league") == ""
    assert resolve_field({"Other": "x"}, "no_such_field") == ""


def test_infer_year_prefers_first_text_then_falls_back() -> None:
    assert infer_year("2024 Topps Finest") == "2024"
    assert infer_year("Ronaldo FC", "2023 Topps Chrome") == "2023"
    assert infer_year("1999-00 Upper Deck 2001") == "1999"


def test_infer_year_without_year_token() -> None:
    assert infer_year("Topps Chrome #10", "Base") == ""
    assert infer_year("Card 12019") == ""


def test_infer_serial_extracts_print_run() -> None:
    assert infer_serial("Aqua Refractor /99") == "99"
    assert infer_serial("Gold 12/50") == "50"
    assert infer_serial("Base", "Card / 5") == "5"


def test_infer_serial_absent() -> None:
    assert infer_serial("Base") is None
    assert infer_serial("", "") is None


def test_is_autograph_whole_word_only() -> None:
    assert is_autograph("On-Card Auto") is True
    assert is_autograph("Base", "Signed Rookie") is True
    assert is_autograph("AUTOGRAPH Patch") is True
    assert is_autograph("Automobile Parallel") is False
    assert is_autograph("Autos") is False


def test_is_numbered_patterns() -> None:
    assert is_numbered("Gold /50") is True
    assert is_numbered("12/50") is True
    assert is_numbered("Serial numbered to 25") is True
    assert is_numbered("Base Refractor") is False
    assert is_numbered("") is False


def test_make_identity_key_synthesizes_slug() -> None:
    key = make_identity_key(
        season="2023-2024",
        card_set="2023 Topps Chrome",
        player="C. Ronaldo",
        card_number="10",
        features="Auto /25",
    )
    assert key == "2023-2024-2023-topps-chrome-c-ronaldo-10-auto-25"


def test_make_identity_key_strips_quotes_and_prefers_explicit_id() -> None:
    assert make_identity_key(player="Kieran O'Brien", features='"Gold"') == "kieran-obrien-gold"
    assert make_identity_key(explicit_id="INV-0042", player="Anyone") == "INV-0042"
    assert make_identity_key() == ""


def test_make_identity_key_is_bounded() -> None:
    key = make_identity_key(card_set="Topps " * 40, player="Long Name")
    assert 0 < len(key) <= IDENTITY_KEY_MAX_LENGTH
    assert not key.endswith("-")


def test_slugify_identity_folds_accents() -> None:
    """Accented letters fold to their base letter instead of splitting the key."""
    assert slugify_identity("Vinícius Júnior", "Pelé") == "vinicius-junior-pele"
    assert slugify_identity("Kylian_Mbappé") == "kylian-mbappe"


def test_make_display_title_prefers_explicit_title() -> None:
    assert make_display_title(explicit_title="Ronaldo FC", year="2023", player="C. Ronaldo") == "Ronaldo FC"


def test_make_display_title_composes_without_repeating_year() -> None:
    title = make_display_title(
        year="2024",
        card_set="2024 Topps Finest MLS",
        player="Lionel Messi",
        features="Aqua Refractor /99",
        card_number="1",
    )
    assert title == "2024 Topps Finest MLS Lionel Messi Aqua Refractor /99 #1"


def test_make_display_title_falls_back_when_everything_is_empty() -> None:
    assert make_display_title() == "Card"


def test_normalize_record_derives_all_fields() -> None:
    """Ronaldo scenario: year from the set, serial and autograph from features."""
    record = {
        "Card Name": "Ronaldo FC",
        "Player Name": "C. Ronaldo",
        "Sport": "Soccer",
        "Card Number": "10",
        "Features": "Auto /25",
        "IMAGE URL": "http://img",
        "League": "La Liga",
        "Team ": "Real",
        "Season": "2023-2024",
        "Condition": "NM",
        "Brand": "Topps",
        "Card Set": "2023 Topps Chrome",
    }
    card = normalize_record(record, source_row=2)

    assert card.year == "2023"
    assert card.serial == "25"
    assert card.is_serial_numbered is True
    assert card.is_autograph is True
    assert card.title == "Ronaldo FC"
    assert card.team == "Real"
    assert card.image_url == "http://img"
    assert card.source_row == 2
    assert card.identity_key == "2023-2024-2023-topps-chrome-c-ronaldo-10-auto-25"


def test_normalize_record_is_deterministic() -> None:
    """Identical input produces equal cards and equal identity keys."""
    record = {"Player Name": "Pelé", "Card Set": "1970 Panini", "Features": "Base"}
    first = normalize_record(record)
    second = normalize_record(dict(record))
    assert first == second
    assert first.identity_key == "1970-panini-pele-base"


def test_normalize_record_with_no_known_columns_degrades_to_defaults() -> None:
    card = normalize_record({"Unrelated": "value"})
    assert card.identity_key == ""
    assert card.title == "Card"
    assert card.year == ""
    assert card.serial is None
    assert card.is_autograph is False
