"""
Regional item names → canonical catalog vocabulary.

TRANSLATIONS is an ordered tuple, not a dict: the first key found wins, so
longer and more specific forms are listed before the shorter words they
contain ("ullipayalu" before "ullipaya", "tamatar" before "tamata").
"""

TRANSLATIONS = (
    # Telugu, multi-word first
    ("kandi pappu", "toor dal"),
    ("pesara pappu", "moong dal"),
    ("tea podi", "tea"),
    ("ullipayalu", "onion"),
    ("ullipaya", "onion"),
    ("bangaladumpa", "potato"),
    ("panchadara", "sugar"),
    ("chakkera", "sugar"),
    ("biyyam", "rice"),
    ("paalu", "milk"),
    ("perugu", "curd"),
    ("gudlu", "egg"),
    ("guddu", "egg"),
    ("pasupu", "turmeric"),
    ("kaaram", "chilli powder"),
    ("sabbu", "soap"),
    ("pappu", "dal"),
    ("uppu", "salt"),
    ("nune", "oil"),
    # Hindi
    ("sarson ka tel", "mustard oil"),
    ("chai patti", "tea"),
    ("chaawal", "rice"),
    ("chawal", "rice"),
    ("doodh", "milk"),
    ("dudh", "milk"),
    ("namak", "salt"),
    ("cheeni", "sugar"),
    ("shakkar", "sugar"),
    ("chini", "sugar"),
    ("dahi", "curd"),
    ("ande", "egg"),
    ("anda", "egg"),
    ("pyaaz", "onion"),
    ("pyaj", "onion"),
    ("aloo", "potato"),
    ("tamatar", "tomato"),
    ("tamata", "tomato"),
    ("haldi", "turmeric"),
    ("mirchi", "chilli"),
    ("sabun", "soap"),
)

EXACT_TRANSLATIONS = dict(TRANSLATIONS)


def translate_phrase(phrase: str) -> str:
    if not phrase:
        return phrase

    # 1️⃣ Whole phrase is a known word
    exact = EXACT_TRANSLATIONS.get(phrase)
    if exact is not None:
        return exact

    # 2️⃣ First known word inside the phrase, replaced once
    for source, canonical in TRANSLATIONS:
        if source in phrase:
            return phrase.replace(source, canonical, 1)

    return phrase
