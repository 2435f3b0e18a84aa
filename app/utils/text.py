from typing import Optional


def spanish_conjunction(next_word: Optional[str]) -> str:
    """'y' becomes 'e' before words starting with the vowel sound i (i-, hi-)."""
    if not next_word:
        return "y"
    word = next_word.strip().lower()
    if word.startswith("i") or word.startswith("hi"):
        return "e"
    return "y"


def full_name(name: Optional[str], lastname: Optional[str] = None) -> str:
    return f"{name or ''} {lastname or ''}".strip()


def couple_display_name(
    name: str,
    lastname: Optional[str] = None,
    secondary_name: Optional[str] = None,
    secondary_lastname: Optional[str] = None,
) -> str:
    """Display name for a guest and an optional companion, e.g. 'Ana López e Iván Ruiz'."""
    primary = full_name(name, lastname)
    if not secondary_name or not secondary_name.strip():
        return primary
    secondary = full_name(secondary_name, secondary_lastname)
    return f"{primary} {spanish_conjunction(secondary_name)} {secondary}"
