"""Ashtakoota (Guna Milan) lookup tables.

Pure data, no logic beyond name canonicalization. Every table is enumerated
explicitly so that each one can be reviewed and tested on its own. Where
classical sources disagree, the chosen variant is noted inline; callers can
override the Tara and Bhakoot point tables through configuration.

Planet identifiers are upper-case (``SUN``, ``MOON``, ... ``RAHU``, ``KETU``).
"""
from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional, Tuple

# ----------------------------------------------------------------------------
# Koota catalogue
# ----------------------------------------------------------------------------

KOOTA_NAMES: Tuple[str, ...] = (
    "varna", "vashya", "tara", "yoni", "graha_maitri", "gana", "bhakoot", "nadi",
)

KOOTA_MAX_POINTS: Dict[str, int] = {
    "varna": 1,
    "vashya": 2,
    "tara": 3,
    "yoni": 4,
    "graha_maitri": 5,
    "gana": 6,
    "bhakoot": 7,
    "nadi": 8,
}

MAX_TOTAL_POINTS = 36

KOOTA_MEANINGS: Dict[str, str] = {
    "varna": "Spiritual & mental balance, mutual respect, non-dominance",
    "vashya": "Control, dominance, mutual influence",
    "tara": "Health, longevity, general wellbeing",
    "yoni": "Physical attraction & intimacy",
    "graha_maitri": "Friendship, mental connection, intellectual sync",
    "gana": "Nature, temperament, and behavioral compatibility",
    "bhakoot": "Emotional harmony and empathy",
    "nadi": "Health of progeny, fertility, life energy",
}

KOOTA_TITLES: Dict[str, str] = {
    "varna": "Varna",
    "vashya": "Vashya",
    "tara": "Tara",
    "yoni": "Yoni",
    "graha_maitri": "Graha Maitri",
    "gana": "Gana",
    "bhakoot": "Bhakoot",
    "nadi": "Nadi",
}

# (inclusive lower bound, rating, advice)
RATING_BANDS: List[Tuple[float, str, str]] = [
    (28.0, "Excellent Match", "Excellent compatibility across most factors. A stable and harmonious match overall."),
    (25.0, "Very Good Match", "Strong compatibility with only minor gaps."),
    (22.0, "Good Match", "Generally compatible. Awareness of the weaker kootas will help."),
    (18.0, "Average Match", "Proceed with caution. Review the low-scoring kootas before deciding."),
    (15.0, "Below Average Match", "Not recommended without deeper analysis and remedies."),
    (0.0, "Poor Match", "Strongly not recommended. Consult an astrologer before proceeding."),
]

# ----------------------------------------------------------------------------
# Nakshatras
# ----------------------------------------------------------------------------

NAKSHATRA_NAMES: Tuple[str, ...] = (
    "Ashwini", "Bharani", "Krittika", "Rohini", "Mrigashira", "Ardra",
    "Punarvasu", "Pushya", "Ashlesha", "Magha", "Purva Phalguni",
    "Uttara Phalguni", "Hasta", "Chitra", "Swati", "Vishakha", "Anuradha",
    "Jyeshtha", "Moola", "Purva Ashadha", "Uttara Ashadha", "Shravana",
    "Dhanishtha", "Shatabhisha", "Purva Bhadrapada", "Uttara Bhadrapada",
    "Revati",
)

NAKSHATRA_NUMBER: Dict[str, int] = {name: i + 1 for i, name in enumerate(NAKSHATRA_NAMES)}

# Common transliteration variants -> canonical name
NAKSHATRA_ALIASES: Dict[str, str] = {
    "ashvini": "Ashwini",
    "aswini": "Ashwini",
    "krithika": "Krittika",
    "kritika": "Krittika",
    "mrigasira": "Mrigashira",
    "mrigashirsha": "Mrigashira",
    "arudra": "Ardra",
    "pushyami": "Pushya",
    "aslesha": "Ashlesha",
    "ashlesa": "Ashlesha",
    "makha": "Magha",
    "purva falguni": "Purva Phalguni",
    "uttara falguni": "Uttara Phalguni",
    "chithra": "Chitra",
    "swathi": "Swati",
    "svati": "Swati",
    "visakha": "Vishakha",
    "jyestha": "Jyeshtha",
    "jyeshta": "Jyeshtha",
    "mula": "Moola",
    "moolam": "Moola",
    "purvashadha": "Purva Ashadha",
    "uttarashadha": "Uttara Ashadha",
    "sravana": "Shravana",
    "shravan": "Shravana",
    "dhanishta": "Dhanishtha",
    "dhanista": "Dhanishtha",
    "shatabhishak": "Shatabhisha",
    "satabhisha": "Shatabhisha",
    "purva bhadra": "Purva Bhadrapada",
    "uttara bhadra": "Uttara Bhadrapada",
    "revathi": "Revati",
}

_CANONICAL_BY_KEY: Dict[str, str] = {name.lower(): name for name in NAKSHATRA_NAMES}


def canonical_nakshatra_name(name: str) -> Optional[str]:
    """Return the canonical spelling of a nakshatra name, or None if unknown."""
    key = " ".join(str(name).replace("_", " ").replace("-", " ").split()).lower()
    if key in _CANONICAL_BY_KEY:
        return _CANONICAL_BY_KEY[key]
    return NAKSHATRA_ALIASES.get(key)


NAKSHATRA_SPAN_DEG = 360.0 / 27.0

# Vimshottari lords repeat every nine nakshatras starting from Ashwini
_VIMSHOTTARI_SEQUENCE = ("KETU", "VENUS", "SUN", "MOON", "MARS", "RAHU", "JUPITER", "SATURN", "MERCURY")
NAKSHATRA_LORD: Dict[str, str] = {
    name: _VIMSHOTTARI_SEQUENCE[i % 9] for i, name in enumerate(NAKSHATRA_NAMES)
}

# ----------------------------------------------------------------------------
# Varna (1)
# ----------------------------------------------------------------------------

VARNA_HIERARCHY: Dict[str, int] = {
    "Brahmin": 4,
    "Kshatriya": 3,
    "Vaishya": 2,
    "Shudra": 1,
}

# Moon sign index (0 = Aries) -> varna, by element: water/fire/earth/air
VARNA_BY_SIGN: Dict[int, str] = {
    3: "Brahmin", 7: "Brahmin", 11: "Brahmin",
    0: "Kshatriya", 4: "Kshatriya", 8: "Kshatriya",
    1: "Vaishya", 5: "Vaishya", 9: "Vaishya",
    2: "Shudra", 6: "Shudra", 10: "Shudra",
}

# ----------------------------------------------------------------------------
# Vashya (2)
# ----------------------------------------------------------------------------

VASHYA_GROUP_BY_LORD: Dict[str, str] = {
    "SUN": "Manav",
    "MOON": "Manav",
    "JUPITER": "Manav",
    "VENUS": "Manav",
    "MERCURY": "Vanchar",
    "MARS": "Chatushpad",
    "SATURN": "Jalchar",
    "RAHU": "Keet",
    "KETU": "Keet",
}
DEFAULT_VASHYA_GROUP = "Manav"

# Directional: first party's group -> groups it accepts for one point
VASHYA_COMPATIBLE: Dict[str, FrozenSet[str]] = {
    "Manav": frozenset({"Vanchar", "Chatushpad"}),
    "Vanchar": frozenset({"Manav", "Jalchar"}),
    "Chatushpad": frozenset({"Manav", "Keet"}),
    "Jalchar": frozenset({"Vanchar"}),
    "Keet": frozenset({"Chatushpad"}),
}

# ----------------------------------------------------------------------------
# Tara (3)
# ----------------------------------------------------------------------------

# Folded nakshatra distance (0..13) -> points
TARA_POINTS: Dict[int, float] = {
    0: 3.0,   # Janma
    1: 1.5,   # Sampat
    2: 2.0,   # Vipat
    3: 1.5,   # Kshema
    4: 2.0,   # Pratyak
    5: 1.5,   # Sadhaka
    6: 2.0,   # Vadha
    7: 1.5,   # Mitra
    8: 2.0,   # Atimitra
    9: 0.0,   # direct opposition
    10: 2.0,
    11: 1.5,
    12: 2.0,
    13: 3.0,
}

# ----------------------------------------------------------------------------
# Yoni (4)
# ----------------------------------------------------------------------------

NAKSHATRA_YONI: Dict[str, str] = {
    "Ashwini": "Horse",
    "Bharani": "Elephant",
    "Krittika": "Goat",
    "Rohini": "Snake",
    "Mrigashira": "Snake",
    "Ardra": "Dog",
    "Punarvasu": "Cat",
    "Pushya": "Goat",
    "Ashlesha": "Cat",
    "Magha": "Rat",
    "Purva Phalguni": "Rat",
    "Uttara Phalguni": "Cow",
    "Hasta": "Buffalo",
    "Chitra": "Tiger",
    "Swati": "Buffalo",
    "Vishakha": "Tiger",
    "Anuradha": "Deer",
    "Jyeshtha": "Deer",
    "Moola": "Dog",
    "Purva Ashadha": "Monkey",
    "Uttara Ashadha": "Mongoose",
    "Shravana": "Monkey",
    "Dhanishtha": "Lion",
    "Shatabhisha": "Horse",
    "Purva Bhadrapada": "Lion",
    "Uttara Bhadrapada": "Cow",
    "Revati": "Elephant",
}

YONI_COMPATIBLE: Dict[str, FrozenSet[str]] = {
    "Horse": frozenset({"Buffalo", "Tiger"}),
    "Elephant": frozenset({"Snake", "Cow"}),
    "Goat": frozenset({"Monkey", "Mongoose"}),
    "Snake": frozenset({"Elephant", "Monkey"}),
    "Dog": frozenset({"Deer"}),
    "Cat": frozenset({"Rat", "Tiger"}),
    "Rat": frozenset({"Cat", "Goat"}),
    "Cow": frozenset({"Elephant", "Horse"}),
    "Buffalo": frozenset({"Horse", "Snake"}),
    "Tiger": frozenset({"Horse", "Cat"}),
    "Deer": frozenset({"Dog", "Monkey"}),
    "Monkey": frozenset({"Goat", "Snake"}),
    "Mongoose": frozenset({"Goat", "Lion"}),
    "Lion": frozenset({"Mongoose", "Cow"}),
}

# ----------------------------------------------------------------------------
# Graha Maitri (5)
# ----------------------------------------------------------------------------

# Relations are directional (how the key planet regards the others)
PLANETARY_FRIENDSHIP: Dict[str, Dict[str, FrozenSet[str]]] = {
    "SUN": {
        "friends": frozenset({"MOON", "MARS", "JUPITER"}),
        "neutrals": frozenset({"MERCURY"}),
        "enemies": frozenset({"VENUS", "SATURN"}),
    },
    "MOON": {
        "friends": frozenset({"SUN", "MERCURY"}),
        "neutrals": frozenset({"MARS", "JUPITER", "VENUS", "SATURN"}),
        "enemies": frozenset(),
    },
    "MARS": {
        "friends": frozenset({"SUN", "MOON", "JUPITER"}),
        "neutrals": frozenset({"MERCURY", "VENUS"}),
        "enemies": frozenset({"SATURN"}),
    },
    "MERCURY": {
        "friends": frozenset({"SUN", "VENUS"}),
        "neutrals": frozenset({"MARS", "JUPITER", "SATURN"}),
        "enemies": frozenset({"MOON"}),
    },
    "JUPITER": {
        "friends": frozenset({"SUN", "MOON", "MARS"}),
        "neutrals": frozenset({"SATURN"}),
        "enemies": frozenset({"MERCURY", "VENUS"}),
    },
    "VENUS": {
        "friends": frozenset({"MERCURY", "SATURN"}),
        "neutrals": frozenset({"MARS", "JUPITER"}),
        "enemies": frozenset({"SUN", "MOON"}),
    },
    "SATURN": {
        "friends": frozenset({"MERCURY", "VENUS"}),
        "neutrals": frozenset({"JUPITER"}),
        "enemies": frozenset({"SUN", "MOON", "MARS"}),
    },
    "RAHU": {
        "friends": frozenset(),
        "neutrals": frozenset({"SATURN", "VENUS"}),
        "enemies": frozenset({"SUN", "MOON", "MARS", "JUPITER", "MERCURY"}),
    },
    "KETU": {
        "friends": frozenset(),
        "neutrals": frozenset({"MARS", "VENUS"}),
        "enemies": frozenset({"SUN", "MOON", "JUPITER", "MERCURY", "SATURN"}),
    },
}

GRAHA_MAITRI_POINTS: Dict[str, float] = {
    "same_lord": 5.0,
    "friend": 5.0,
    "neutral": 2.5,
    "enemy": 0.0,
    "unlisted": 1.0,
}

# ----------------------------------------------------------------------------
# Gana (6)
# ----------------------------------------------------------------------------

NAKSHATRA_GANA: Dict[str, str] = {
    "Ashwini": "Deva",
    "Bharani": "Manushya",
    "Krittika": "Rakshasa",
    "Rohini": "Manushya",
    "Mrigashira": "Deva",
    "Ardra": "Manushya",
    "Punarvasu": "Deva",
    "Pushya": "Deva",
    "Ashlesha": "Rakshasa",
    "Magha": "Rakshasa",
    "Purva Phalguni": "Manushya",
    "Uttara Phalguni": "Manushya",
    "Hasta": "Deva",
    "Chitra": "Rakshasa",
    "Swati": "Deva",
    "Vishakha": "Rakshasa",
    "Anuradha": "Deva",
    "Jyeshtha": "Rakshasa",
    "Moola": "Rakshasa",
    "Purva Ashadha": "Manushya",
    "Uttara Ashadha": "Manushya",
    "Shravana": "Deva",
    "Dhanishtha": "Rakshasa",
    "Shatabhisha": "Rakshasa",
    "Purva Bhadrapada": "Manushya",
    "Uttara Bhadrapada": "Manushya",
    "Revati": "Deva",
}

GANA_COMPATIBLE: Dict[str, FrozenSet[str]] = {
    "Deva": frozenset({"Manushya"}),
    "Manushya": frozenset({"Deva", "Rakshasa"}),
    "Rakshasa": frozenset({"Manushya"}),
}

# ----------------------------------------------------------------------------
# Bhakoot (7)
# ----------------------------------------------------------------------------

# Folded sign distance (0..6) -> points
BHAKOOT_POINTS: Dict[int, float] = {
    0: 0.0,
    1: 7.0,
    2: 6.0,
    3: 5.0,
    4: 4.0,
    5: 3.0,
    6: 2.0,
}

# ----------------------------------------------------------------------------
# Nadi (8)
# ----------------------------------------------------------------------------

NAKSHATRA_NADI: Dict[str, str] = {
    "Ashwini": "Adi",
    "Bharani": "Madhya",
    "Krittika": "Antya",
    "Rohini": "Antya",
    "Mrigashira": "Madhya",
    "Ardra": "Adi",
    "Punarvasu": "Adi",
    "Pushya": "Madhya",
    "Ashlesha": "Antya",
    "Magha": "Antya",
    "Purva Phalguni": "Madhya",
    "Uttara Phalguni": "Adi",
    "Hasta": "Adi",
    "Chitra": "Madhya",
    "Swati": "Antya",
    "Vishakha": "Antya",
    "Anuradha": "Madhya",
    "Jyeshtha": "Adi",
    "Moola": "Adi",
    "Purva Ashadha": "Madhya",
    "Uttara Ashadha": "Antya",
    "Shravana": "Antya",
    "Dhanishtha": "Madhya",
    "Shatabhisha": "Adi",
    "Purva Bhadrapada": "Adi",
    "Uttara Bhadrapada": "Madhya",
    "Revati": "Antya",
}
