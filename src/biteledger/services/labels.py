"""Parse OCR text from nutrition facts labels."""

import logging
import re
from collections.abc import Sequence

from biteledger.domain.labels import LabelFacts
from biteledger.services.servings import parse_serving

_logger = logging.getLogger(__name__)

_SERVING_SIZE = re.compile(r"serving size\s*(.+?)$", re.IGNORECASE)
_INTEGER = re.compile(r"\d+")
_BARE_INTEGER = re.compile(r"^\s*(\d+)\s*$")
_CALORIES_INLINE = re.compile(r"calories\s*(\d+)", re.IGNORECASE)
_AMOUNT_PATTERNS = (
    re.compile(r"(\d+\.?\d*)\s*g"),
    re.compile(r"(\d+\.?\d*)\s*mg"),
    re.compile(r"(\d+\.?\d*)\s*mcg"),
    re.compile(r"(\d+\.?\d*)\s*µg"),
    re.compile(r"(\d+\.?\d*)\s*(?=\s|$)"),
)
_MARKETING_HINTS = ("fewer calories", "reduced", "than", "%", "percent")
_MAX_CALORIES = 1000

# field -> (keywords, exclusions); a line matches when it holds any keyword
# and none of the exclusions.
_NUTRIENT_KEYWORDS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "total_fat": (
        ("total fat", "fat"),
        ("saturated", "sat.", "sat fat", "trans", "from fat", "mono", "poly"),
    ),
    "saturated_fat": (("saturated fat", "sat. fat", "sat fat"), ()),
    "trans_fat": (("trans fat",), ()),
    "cholesterol": (("cholesterol",), ()),
    "sodium": (("sodium",), ()),
    "total_carbs": (("total carbohydrate", "total carb", "carbohydrate"), ()),
    "fiber": (("dietary fiber", "fiber"), ()),
    "sugars": (("total sugars", "sugars"), ("added",)),
    "added_sugars": (("added sugars", "incl. added sugars"), ()),
    "protein": (("protein",), ()),
    "vitamin_d": (("vitamin d",), ()),
    "calcium": (("calcium",), ()),
    "iron": (("iron",), ()),
    "potassium": (("potassium",), ()),
}


def parse_label(lines: Sequence[str]) -> LabelFacts | None:
    """Parse OCR lines into label facts.

    Returns None when the text does not look like a nutrition label or no
    value could be read.
    """
    full_text = " ".join(lines).lower()
    if "nutrition" not in full_text and "calories" not in full_text:
        _logger.info("OCR text does not look like a nutrition label")
        return None

    values: dict[str, object] = {}
    calories = _calories_from_lines(lines)
    if calories is not None:
        values["calories"] = calories

    for line in lines:
        cleaned = line.lower().strip()
        if "serving size" in cleaned:
            values["serving_size"] = _serving_size(line)
        if "servings per container" in cleaned:
            match = _INTEGER.search(line)
            values["servings_per_container"] = match.group(0) if match else None
        for field_name, (keywords, exclusions) in _NUTRIENT_KEYWORDS.items():
            if not any(keyword in cleaned for keyword in keywords):
                continue
            if any(word in cleaned for word in exclusions):
                continue
            amount = _first_amount(cleaned)
            if amount is not None:
                values[field_name] = amount

    if not any(value is not None for value in values.values()):
        return None
    return LabelFacts(**values)


def label_serving_grams(facts: LabelFacts) -> float | None:
    """Return the gram weight printed with the serving size, if any."""
    parsed = parse_serving(facts.serving_size)
    if parsed is None:
        return None
    return parsed.grams


def _serving_size(line: str) -> str | None:
    match = _SERVING_SIZE.search(line)
    if match is None:
        return None
    extracted = match.group(1).strip()
    return extracted or None


def _first_amount(text: str) -> float | None:
    for pattern in _AMOUNT_PATTERNS:
        match = pattern.search(text)
        if match is not None:
            return float(match.group(1))
    return None


def _plausible(value: int) -> bool:
    return 0 < value < _MAX_CALORIES


def _bare_number(line: str) -> int | None:
    match = _BARE_INTEGER.match(line)
    if match is None:
        return None
    value = int(match.group(1))
    return value if _plausible(value) else None


def _calories_from_lines(lines: Sequence[str]) -> float | None:  # noqa: PLR0912
    """Find the calorie count, preferring the facts table over marketing copy."""
    for index, line in enumerate(lines):
        cleaned = line.lower().strip()
        if "calorie" not in cleaned:
            continue
        if any(hint in cleaned for hint in _MARKETING_HINTS):
            continue

        near_amount_per_serving = any(
            "amount per serving" in lines[back].lower()
            for back in (index - 1, index - 2)
            if back >= 0
        )
        next_line = lines[index + 1] if index + 1 < len(lines) else None

        if cleaned in {"calories", "calorie"}:
            if next_line is None:
                continue
            value = _bare_number(next_line)
            if value is not None:
                return float(value)
            lowered_next = next_line.lower()
            # OCR dropped the number; fall back to nearby "N calories per ..."
            if "total fat" in lowered_next or "daily value" in lowered_next:
                for back in range(index - 1, max(0, index - 10) - 1, -1):
                    back_line = lines[back].lower()
                    if "calorie" in back_line and "per" in back_line:
                        numbers = [int(n) for n in _INTEGER.findall(lines[back])]
                        valid = [n for n in numbers if _plausible(n)]
                        if valid:
                            return float(valid[0])
            continue

        if near_amount_per_serving or cleaned.startswith("calories"):
            match = _CALORIES_INLINE.search(line)
            if match is not None and _plausible(int(match.group(1))):
                return float(match.group(1))

        if next_line is not None:
            value = _bare_number(next_line)
            if value is not None:
                return float(value)

    for line in lines:
        cleaned = line.lower().strip()
        if "calories per" in cleaned or ("to" in cleaned and "calories" in cleaned):
            numbers = [int(n) for n in _INTEGER.findall(line)]
            for number in reversed(numbers):
                if _plausible(number):
                    return float(number)
    return None
