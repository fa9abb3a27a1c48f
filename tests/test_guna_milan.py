import doctest
import unittest
from collections import Counter

import pytest

import services.synastry_vedic_services as vedic
from compat_core.charts import Nakshatra
from compat_core.errors import CalculationError, ValidationError
from compat_core.koota_tables import (
    GANA_COMPATIBLE,
    KOOTA_MAX_POINTS,
    MAX_TOTAL_POINTS,
    NAKSHATRA_GANA,
    NAKSHATRA_LORD,
    NAKSHATRA_NADI,
    NAKSHATRA_NAMES,
    NAKSHATRA_NUMBER,
    NAKSHATRA_YONI,
    PLANETARY_FRIENDSHIP,
    YONI_COMPATIBLE,
    canonical_nakshatra_name,
)
from services.synastry_vedic_services import (
    GunaMilanCalculator,
    bhakoot_distance,
    explain_guna_milan,
    graha_relation,
    koota_compatibility_status,
    nakshatra_from_longitude,
    score_bhakoot,
    score_graha_maitri,
    score_guna_milan,
    score_tara,
    score_varna,
    score_vashya,
    score_yoni,
    tara_distance,
)


def _nak(name, lord, caste, sign):
    return Nakshatra(name=name, number=NAKSHATRA_NUMBER[name], lord=lord, caste=caste, sign=sign)


def _pair(make_chart, make_moon, first, second):
    return make_chart({}, nakshatra=make_moon(*first)), make_chart({}, nakshatra=make_moon(*second))


ASHWINI = ("Ashwini", "KETU", "Kshatriya", 0)
SWATI = ("Swati", "RAHU", "Kshatriya", 1)


def test_module_doctests():
    failures, _ = doctest.testmod(vedic)
    assert failures == 0


# ---------------------------------------------------------------- tables


class TestKootaTables(unittest.TestCase):
    def test_every_nakshatra_is_classified(self):
        self.assertEqual(len(NAKSHATRA_NAMES), 27)
        for table in (NAKSHATRA_LORD, NAKSHATRA_YONI, NAKSHATRA_GANA, NAKSHATRA_NADI):
            self.assertEqual(set(table), set(NAKSHATRA_NAMES))

    def test_gana_and_nadi_split_nine_each(self):
        self.assertEqual(Counter(NAKSHATRA_GANA.values()), {"Deva": 9, "Manushya": 9, "Rakshasa": 9})
        self.assertEqual(Counter(NAKSHATRA_NADI.values()), {"Adi": 9, "Madhya": 9, "Antya": 9})

    def test_standard_gana_and_nadi_assignments(self):
        for name in ("Chitra", "Vishakha", "Dhanishtha"):
            self.assertEqual(NAKSHATRA_GANA[name], "Rakshasa")
        for name in ("Purva Phalguni", "Purva Ashadha", "Uttara Bhadrapada"):
            self.assertEqual(NAKSHATRA_GANA[name], "Manushya")
        self.assertEqual(NAKSHATRA_NADI["Purva Phalguni"], "Madhya")

    def test_yoni_animals_have_compatibility_rows(self):
        self.assertLessEqual(set(NAKSHATRA_YONI.values()), set(YONI_COMPATIBLE))
        self.assertEqual(set(GANA_COMPATIBLE), {"Deva", "Manushya", "Rakshasa"})

    def test_lords_follow_vimshottari_order(self):
        self.assertEqual(NAKSHATRA_LORD["Ashwini"], "KETU")
        self.assertEqual(NAKSHATRA_LORD["Magha"], "KETU")
        self.assertEqual(NAKSHATRA_LORD["Rohini"], "MOON")
        self.assertEqual(NAKSHATRA_LORD["Revati"], "MERCURY")

    def test_friendship_categories_are_disjoint(self):
        for planet, rel in PLANETARY_FRIENDSHIP.items():
            with self.subTest(planet=planet):
                self.assertFalse(rel["friends"] & rel["neutrals"])
                self.assertFalse(rel["friends"] & rel["enemies"])
                self.assertFalse(rel["neutrals"] & rel["enemies"])

    def test_max_points_sum_to_36(self):
        self.assertEqual(sum(KOOTA_MAX_POINTS.values()), MAX_TOTAL_POINTS)
        self.assertEqual(MAX_TOTAL_POINTS, 36)


@pytest.mark.parametrize("raw, name", [("mula", "Moola"), ("purva-phalguni", "Purva Phalguni"), ("ROHINI", "Rohini"), ("Atlantis", None)])
def test_canonical_names(raw, name):
    assert canonical_nakshatra_name(raw) == name


# ---------------------------------------------------------------- kootas


def test_varna_is_directional():
    shudra = _nak("Ardra", "RAHU", "Shudra", 2)
    brahmin = _nak("Pushya", "SATURN", "Brahmin", 3)
    assert score_varna(shudra, brahmin)["awarded"] == 1.0
    assert score_varna(brahmin, shudra)["awarded"] == 0.0


def test_vashya_groups():
    sun = _nak("Krittika", "SUN", "Kshatriya", 0)
    saturn = _nak("Pushya", "SATURN", "Brahmin", 3)
    assert score_vashya(sun, saturn)["awarded"] == 0.0
    assert score_vashya(sun, sun)["awarded"] == 2.0
    mercury = _nak("Ashlesha", "MERCURY", "Brahmin", 3)
    assert score_vashya(sun, mercury)["awarded"] == 1.0


def test_tara_distance_folds():
    assert tara_distance(1, 27) == 1
    assert tara_distance(1, 10) == 9
    assert tara_distance(1, 15) == 13
    ashwini, magha = _nak(*ASHWINI), _nak("Magha", "KETU", "Kshatriya", 4)
    assert score_tara(ashwini, magha)["awarded"] == 0.0


def test_tara_table_override():
    table = {d: 1.0 for d in range(14)}
    assert score_tara(_nak(*ASHWINI), _nak(*ASHWINI), table)["awarded"] == 1.0


def test_yoni_compatibility_checked_both_ways():
    horse = _nak(*ASHWINI)
    cow = _nak("Uttara Phalguni", "SUN", "Kshatriya", 4)
    assert score_yoni(horse, cow)["awarded"] == 2.0
    assert score_yoni(cow, horse)["awarded"] == 2.0
    assert score_yoni(horse, horse)["detail"]["class"] == "same"
    snake = _nak("Rohini", "MOON", "Vaishya", 1)
    buffalo = _nak("Hasta", "MOON", "Vaishya", 5)
    assert score_yoni(snake, buffalo)["awarded"] == 2.0
    assert score_yoni(buffalo, snake)["awarded"] == 2.0


@pytest.mark.parametrize(
    "a, b, relation",
    [
        ("MOON", "MERCURY", "friend"),
        ("SUN", "VENUS", "enemy"),
        ("SUN", "RAHU", "unlisted"),
        ("RAHU", "SUN", "enemy"),
        ("JUPITER", "MERCURY", "enemy"),
        ("MERCURY", "JUPITER", "neutral"),
        ("MOON", "RAHU", "unlisted"),
        ("SATURN", "RAHU", "unlisted"),
        ("RAHU", "KETU", "unlisted"),
        ("MOON", "SATURN", "neutral"),
        ("MARS", "MARS", "same_lord"),
    ],
)
def test_graha_relation(a, b, relation):
    assert graha_relation(a, b) == relation


@pytest.mark.parametrize(
    "bride, groom, points",
    [
        (("Punarvasu", "JUPITER", "Brahmin", 3), ("Ashlesha", "MERCURY", "Brahmin", 3), 0.0),
        (("Rohini", "MOON", "Vaishya", 1), ("Swati", "RAHU", "Shudra", 6), 1.0),
        (("Pushya", "SATURN", "Brahmin", 3), ("Ardra", "RAHU", "Shudra", 2), 1.0),
    ],
)
def test_graha_maitri_reads_bride_table_for_neutral_and_enemy(bride, groom, points):
    assert score_graha_maitri(_nak(*bride), _nak(*groom))["awarded"] == points


def test_bhakoot_distances():
    assert bhakoot_distance(0, 11) == 1
    assert bhakoot_distance(0, 6) == 6
    assert bhakoot_distance(3, 3) == 0
    a = _nak(*ASHWINI)
    assert score_bhakoot(a, _nak("Revati", "MERCURY", "Brahmin", 11))["awarded"] == 7.0
    assert score_bhakoot(a, _nak("Swati", "RAHU", "Shudra", 6))["awarded"] == 2.0


@pytest.mark.parametrize(
    "awarded, max_points, status",
    [(0, 8, "Dosha (bad)"), (1, 8, "Neutral"), (4, 8, "Average"), (6, 8, "Good"), (8, 8, "Excellent")],
)
def test_koota_status(awarded, max_points, status):
    assert koota_compatibility_status(awarded, max_points) == status


# ---------------------------------------------------------------- totals


def test_identical_nakshatras(make_chart, make_moon, rohini):
    chart = make_chart({}, nakshatra=rohini)
    result = score_guna_milan(chart, chart)
    assert result.scores == {
        "varna": 1.0,
        "vashya": 2.0,
        "tara": 3.0,
        "yoni": 4.0,
        "graha_maitri": 5.0,
        "gana": 6.0,
        "bhakoot": 0.0,
        "nadi": 0.0,
    }
    assert result.total == 21.0
    assert result.percentage == 58
    assert result.rating == "Average Match"
    assert [r["type"] for r in result.recommendations] == ["Critical", "Critical", "Positive", "Positive"]
    assert [e["name"] for e in result.exceptions] == ["Rajju Exception"]
    assert result.analysis["confidence"] == "Medium"
    assert result.analysis["favourableDays"] == ["Fridays", "Wednesdays", "Mondays"]


def test_excellent_match(make_chart, make_moon):
    bride, groom = _pair(make_chart, make_moon, ASHWINI, SWATI)
    result = score_guna_milan(bride, groom)
    assert result.total == 30.0
    assert result.percentage == 83
    assert result.rating == "Excellent Match"
    assert result.koota_details["graha_maitri"]["detail"]["relation"] == "unlisted"
    assert result.exceptions == []
    assert result.analysis["confidence"] == "High"


def test_poor_match(make_chart, make_moon):
    bride, groom = _pair(
        make_chart, make_moon, ("Ashwini", "KETU", "Brahmin", 0), ("Jyeshtha", "MERCURY", "Shudra", 0)
    )
    result = score_guna_milan(bride, groom)
    assert result.total == 2.0
    assert result.percentage == 6
    assert result.rating == "Poor Match"
    assert any(r["type"] == "Warning" for r in result.recommendations)
    assert [e["name"] for e in result.exceptions] == ["Rajju Exception"]
    assert result.analysis["favourableDays"] == ["Mondays"]
    assert result.analysis["confidence"] == "Low"
    assert "Overall compatibility below recommended threshold" in result.analysis["challenges"]


def test_every_koota_in_range(make_chart, make_moon):
    bride, groom = _pair(make_chart, make_moon, ASHWINI, SWATI)
    result = score_guna_milan(bride, groom)
    for key, part in result.koota_details.items():
        assert 0 <= part["awarded"] <= KOOTA_MAX_POINTS[key]
        assert part["compatibility_status"]
        assert part["meaning"]
    assert 0 <= result.total <= 36
    assert sum(result.scores.values()) == result.total


def test_missing_nakshatra_is_validation_error(make_chart, rohini):
    with pytest.raises(ValidationError) as excinfo:
        score_guna_milan(make_chart({}, nakshatra=rohini), make_chart({}))
    assert excinfo.value.details["chart"] == "chart2"


def test_out_of_range_table_value_is_calculation_error(make_chart, rohini):
    chart = make_chart({}, nakshatra=rohini)
    calc = GunaMilanCalculator(tara_points={0: 5.0})
    with pytest.raises(CalculationError) as excinfo:
        calc.calculate_compatibility(chart, chart)
    assert excinfo.value.details["koota"] == "tara"


def test_bhakoot_override_changes_total(make_chart, rohini):
    chart = make_chart({}, nakshatra=rohini)
    table = {d: 7.0 for d in range(7)}
    assert score_guna_milan(chart, chart, bhakoot_points=table).total == 28.0


def test_to_dict_shape(make_chart, rohini):
    chart = make_chart({}, nakshatra=rohini)
    data = score_guna_milan(chart, chart).to_dict()
    assert data["bride"] == {"nakshatra": "Rohini", "number": 4, "lord": "MOON", "sign": 1}
    assert data["totalScore"] == 21.0
    assert data["maxScore"] == 36
    assert data["compatibility"] == "Average Match"
    assert data["kootas"]["nadi"]["compatibility_status"] == "Dosha (bad)"
    assert data["kootas"]["varna"]["compatibility_status"] == "Excellent"


def test_explanation_lines(make_chart, rohini):
    chart = make_chart({}, nakshatra=rohini)
    lines = explain_guna_milan(score_guna_milan(chart, chart)).splitlines()
    assert lines[0] == "Bride: Rohini (MOON), Groom: Rohini (MOON)"
    assert any(line.startswith("Nadi: 0.0/8") for line in lines)
    assert "Total: 21.0/36 (58%)" in lines
    assert lines[-2].startswith("Rating: Average Match.")
    assert lines[-1].startswith("Rajju Exception:")


@pytest.mark.parametrize(
    "lon, name, number, lord, sign, caste",
    [
        (0.0, "Ashwini", 1, "KETU", 0, "Kshatriya"),
        (45.0, "Rohini", 4, "MOON", 1, "Vaishya"),
        (359.9, "Revati", 27, "MERCURY", 11, "Brahmin"),
    ],
)
def test_nakshatra_from_longitude(lon, name, number, lord, sign, caste):
    assert nakshatra_from_longitude(lon) == Nakshatra(name=name, number=number, lord=lord, caste=caste, sign=sign)
