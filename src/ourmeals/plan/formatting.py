"""Display formatting for grocery lines."""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from types import MappingProxyType

from ourmeals.plan.grocery import BareLine, GroceryLine, QuantifiedLine


@dataclass(frozen=True)
class LocaleFormat:
    """Number separators and count nouns for one display locale."""

    group_separator: str
    decimal_separator: str
    piece: str
    pieces: str


LOCALES: MappingProxyType[str, LocaleFormat] = MappingProxyType(
    {
        "fr": LocaleFormat(
            group_separator="\u202f",
            decimal_separator=",",
            piece="pièce",
            pieces="pièces",
        ),
        "en": LocaleFormat(
            group_separator=",",
            decimal_separator=".",
            piece="piece",
            pieces="pieces",
        ),
    }
)

_CENT = Decimal("0.01")


def get_locale_format(locale: str) -> LocaleFormat:
    """
    Look up a display locale by language code.

    Region suffixes are ignored ("fr-FR" and "fr_CA" both give "fr").

    Raises:
        ValueError: for languages other than French and English.
    """
    language = locale.replace("_", "-").split("-", 1)[0].lower()
    try:
        return LOCALES[language]
    except KeyError:
        raise ValueError(f"Unsupported display locale: {locale!r}") from None


def round_quantity(value: float) -> Decimal:
    """
    Round a quantity to 2 decimal places, halves away from zero.

    Precision grows with the magnitude, so totals of any finite size round
    exactly.

    Raises:
        ValueError: if value is not finite.
    """
    number = Decimal(repr(float(value)))
    if not number.is_finite():
        raise ValueError(f"Cannot round non-finite quantity {value!r}")

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + 4)
        return number.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_number(value: float, locale: str = "fr") -> str:
    """
    Format a quantity for display.

    Examples (fr):
        1.0 -> "1"
        1.5 -> "1,5"
        1234.567 -> "1 234,57" (narrow no-break space)
    """
    fmt = get_locale_format(locale)
    text = f"{round_quantity(value):,f}"
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")

    whole = whole.replace(",", fmt.group_separator)
    if fraction:
        return f"{whole}{fmt.decimal_separator}{fraction}"
    return whole


def unit_label(unit: str, total: float, locale: str = "fr") -> str:
    """Get the unit as displayed; count units become piece/pieces."""
    if unit != "unit":
        return unit
    fmt = get_locale_format(locale)
    return fmt.pieces if round_quantity(total) > 1 else fmt.piece


def format_line(line: GroceryLine, locale: str = "fr") -> str:
    """Render one grocery line, e.g. "100 g farine" or "2 pièces tomate"."""
    if isinstance(line, QuantifiedLine):
        label = unit_label(line.unit, line.total, locale)
        return f"{format_number(line.total, locale)} {label} {line.name}"
    if isinstance(line, BareLine):
        return line.name
    raise TypeError(f"Unsupported grocery line: {type(line).__name__}")


def format_grocery_list(lines: Iterable[GroceryLine], locale: str = "fr") -> list[str]:
    """Render grocery lines in order."""
    get_locale_format(locale)
    return [format_line(line, locale) for line in lines]
