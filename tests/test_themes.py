from __future__ import annotations

from models import Theme, ThemeColors, ThemeFonts, theme_from_dict
from themes import DEFAULT_THEME, resolve_theme


def test_absent_theme_resolves_to_defaults() -> None:
    resolved = resolve_theme(None)

    assert resolved.primary == "#2563eb"
    assert resolved.secondary == "#1f2937"
    assert resolved.accent == "#f59e0b"
    assert resolved.heading_font == "Helvetica"
    assert resolved.body_font == "Helvetica"


def test_primary_only_keeps_other_defaults() -> None:
    resolved = resolve_theme(Theme(colors=ThemeColors(primary="#7c3aed")))

    assert resolved.primary == "#7c3aed"
    assert resolved.secondary == DEFAULT_THEME.secondary
    assert resolved.accent == DEFAULT_THEME.accent
    assert resolved.heading_font == DEFAULT_THEME.heading_font
    assert resolved.body_font == DEFAULT_THEME.body_font


def test_fonts_only() -> None:
    resolved = resolve_theme(Theme(fonts=ThemeFonts(heading="Playfair Display")))

    assert resolved.heading_font == "Playfair Display"
    assert resolved.body_font == "Helvetica"
    assert resolved.primary == DEFAULT_THEME.primary


def test_full_theme_is_used_as_is() -> None:
    theme = Theme(ThemeColors("#0ea5e9", "#334155", "#f97316"), ThemeFonts("JetBrains Mono", "Inter"))

    resolved = resolve_theme(theme)

    assert (resolved.primary, resolved.secondary, resolved.accent) == ("#0ea5e9", "#334155", "#f97316")
    assert (resolved.heading_font, resolved.body_font) == ("JetBrains Mono", "Inter")


def test_malformed_fields_fall_back_individually() -> None:
    theme = Theme(ThemeColors(primary="blue", secondary="#12345", accent="  "), ThemeFonts(heading="  ", body="Roboto"))

    resolved = resolve_theme(theme)

    assert resolved.primary == DEFAULT_THEME.primary
    assert resolved.secondary == DEFAULT_THEME.secondary
    assert resolved.accent == DEFAULT_THEME.accent
    assert resolved.heading_font == DEFAULT_THEME.heading_font
    assert resolved.body_font == "Roboto"


def test_theme_from_dict_partial() -> None:
    theme = theme_from_dict({"colors": {"accent": "#10b981"}})

    resolved = resolve_theme(theme)

    assert resolved.accent == "#10b981"
    assert resolved.primary == DEFAULT_THEME.primary
    assert theme_from_dict(None) is None


def test_short_hex_colors_are_expanded() -> None:
    resolved = resolve_theme(Theme(colors=ThemeColors(primary="#fff", accent="#0A3")))

    assert resolved.primary == "#ffffff"
    assert resolved.accent == "#00AA33"
    assert resolved.secondary == DEFAULT_THEME.secondary
