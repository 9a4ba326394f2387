import re

# Leading number words (English, Hindi and Telugu transliterations).
# Only the first token of an order line is looked up here; "do kilo chawal"
# works, "chawal do kilo" does not.
NUMBER_WORDS = {
    # English
    "a": "1",
    "an": "1",
    "one": "1",
    "two": "2",
    "three": "3",
    "four": "4",
    "five": "5",
    "six": "6",
    "seven": "7",
    "eight": "8",
    "nine": "9",
    "ten": "10",
    "eleven": "11",
    "twelve": "12",
    "dozen": "12",
    "half": "0.5",
    # Hindi
    "ek": "1",
    "do": "2",
    "teen": "3",
    "char": "4",
    "chaar": "4",
    "paanch": "5",
    "panch": "5",
    "chhe": "6",
    "saat": "7",
    "aath": "8",
    "nau": "9",
    "das": "10",
    "aadha": "0.5",
    "dedh": "1.5",
    "dhai": "2.5",
    # Telugu
    "okati": "1",
    "oka": "1",
    "rendu": "2",
    "moodu": "3",
    "mudu": "3",
    "nalugu": "4",
    "aidu": "5",
    "aaru": "6",
    "edu": "7",
    "enimidi": "8",
    "tommidi": "9",
    "padi": "10",
    "ara": "0.5",
}

# Separators and symbols that never carry meaning in an order line
PUNCTUATION_RE = re.compile(r"[,/\\;:!?\"'`()\[\]{}*#@&+=|<>~^$%₹_-]")

# A dot is punctuation unless it sits between two digits ("1.5kg")
STRAY_DOT_RE = re.compile(r"(?<!\d)\.|\.(?!\d)")

WHITESPACE_RE = re.compile(r"\s+")


def strip_punctuation(text: str) -> str:
    """
    Lowercase, drop punctuation (keeping decimal points) and collapse spaces.
    Shared by the normalizer and the exact-name comparison in the matcher.
    """
    if not text:
        return ""

    text = PUNCTUATION_RE.sub(" ", text)
    text = STRAY_DOT_RE.sub(" ", text)
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip().lower()


def normalize_text(raw: str) -> str:
    text = strip_punctuation(raw)
    if not text:
        return ""

    words = text.split(" ")

    # ek kilo chawal → 1 kilo chawal
    first = words[0]
    if first in NUMBER_WORDS:
        words[0] = NUMBER_WORDS[first]

    return " ".join(words)
