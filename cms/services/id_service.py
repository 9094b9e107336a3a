"""Item id normalization and default label helpers."""

from __future__ import annotations


def fold_id(raw: str) -> str:
    """Case- and whitespace-insensitive key used to compare ids."""
    return raw.strip().lower()


def normalize_id(raw: str) -> str:
    """Fold an item id to its canonical form: stripped and lower-cased.

    The folded id is what gets stored and what every duplicate check
    compares against, so ``"Home"`` and ``" home "`` name the same item.
    Raises ValueError if nothing is left after stripping.
    """
    item_id = fold_id(raw)
    if not item_id:
        raise ValueError("Item ID must not be empty")
    return item_id


def capitalize_first_letter(text: str) -> str:
    """Upper-case the first character and leave the rest untouched."""
    if not text:
        return text
    return text[0].upper() + text[1:]


def default_label(item_id: str) -> str:
    return capitalize_first_letter(item_id)


def default_title(item_id: str) -> str:
    return f"Page {item_id}"
