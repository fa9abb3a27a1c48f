import pytest

from compat_core.errors import ValidationError
from services.composite_services import CompositeChartGenerator, generate_composite


def test_planet_midpoint(make_chart):
    chart = generate_composite(make_chart({"SUN": 0.0}), make_chart({"SUN": 120.0}))
    assert chart.planets["SUN"].longitude == 60.0


def test_ascendant_midpoint_and_houses(make_chart):
    chart = generate_composite(make_chart({}, ascendant=0.0), make_chart({}, ascendant=180.0))
    assert chart.ascendant == 90.0
    assert len(chart.houses) == 12
    assert chart.houses[0] == pytest.approx(90.0)
    assert chart.houses[3] == pytest.approx(180.0)
    assert chart.houses[11] == pytest.approx(60.0)


def test_midpoint_across_zero(make_chart):
    chart = generate_composite(make_chart({"MOON": 350.0}), make_chart({"MOON": 10.0}))
    assert chart.planets["MOON"].longitude == 0.0


def test_planets_in_one_chart_only_are_omitted(make_chart):
    chart = generate_composite(
        make_chart({"MARS": 10.0, "SUN": 20.0, "PLUTO": 5.0}),
        make_chart({"SUN": 40.0, "MARS": 30.0, "CHIRON": 1.0}),
    )
    assert list(chart.planets) == ["MARS", "SUN"]


def test_planet_sign_degree_and_house(make_chart):
    chart = generate_composite(make_chart({"SUN": 0.0}, ascendant=0.0), make_chart({"SUN": 120.0}, ascendant=180.0))
    sun = chart.planets["SUN"]
    assert sun.sign == 2
    assert sun.degree == pytest.approx(0.0)
    # cusps start at 90, so 60 falls in the last house
    assert sun.house == 12


def test_aspects_over_unordered_pairs(make_chart):
    chart = generate_composite(
        make_chart({"SUN": 0.0, "MOON": 100.0, "VENUS": 0.0}),
        make_chart({"SUN": 0.0, "MOON": 140.0, "VENUS": 0.0}),
    )
    found = [(a.planets, a.aspect) for a in chart.aspects]
    assert found == [
        (("SUN", "MOON"), "trine"),
        (("SUN", "VENUS"), "conjunction"),
        (("MOON", "VENUS"), "trine"),
    ]
    assert all(a.strength == pytest.approx(1.0) for a in chart.aspects)


def test_interpretation_block(make_chart):
    chart = generate_composite(
        make_chart({"SUN": 0.0, "MOON": 100.0, "VENUS": 0.0}),
        make_chart({"SUN": 0.0, "MOON": 140.0, "VENUS": 0.0}),
    )
    interp = chart.interpretation
    assert "Harmonious aspects dominate, suggesting smooth relationship flow" in interp["dominantThemes"]
    assert interp["relationshipStyle"] == "Balanced relationship with complementary energies"
    assert interp["summary"] == (
        "Composite chart with 3 planets and 3 aspects. Relationship with focused, selective energies."
    )
    assert interp["challenges"] == []
    assert interp["strengths"] == []


def test_stellium_and_venus_mars_house(make_chart):
    chart = generate_composite(
        make_chart({"SUN": 2.0, "VENUS": 10.0, "MARS": 20.0}),
        make_chart({"SUN": 4.0, "VENUS": 12.0, "MARS": 22.0}),
    )
    interp = chart.interpretation
    assert "Strong Aries emphasis in relationship" in interp["dominantThemes"]
    assert interp["relationshipStyle"] == "Intensely romantic and passionate connection"


def test_missing_ascendant(make_chart):
    with pytest.raises(ValidationError) as excinfo:
        CompositeChartGenerator(make_chart({"SUN": 1.0}), make_chart({"SUN": 1.0}, ascendant=None))
    assert excinfo.value.details["field"] == "chart2.ascendant"


def test_missing_planets(make_chart):
    with pytest.raises(ValidationError) as excinfo:
        generate_composite({"ascendant": {"longitude": 0.0}}, make_chart({}))
    assert excinfo.value.details["field"] == "chart1.planets"


def test_houses_not_required(make_chart):
    chart = generate_composite(make_chart({"SUN": 10.0}, houses=None), make_chart({"SUN": 20.0}, houses=None))
    assert chart.planets["SUN"].longitude == 15.0


def test_to_dict(make_chart):
    data = generate_composite(make_chart({"SUN": 0.0}, ascendant=10.0), make_chart({"SUN": 120.0}, ascendant=50.0)).to_dict()
    assert data["ascendant"] == {"longitude": 30.0, "sign": 1, "degree": 0.0}
    assert data["planets"]["SUN"]["house"] == 2
    assert data["aspects"] == []
    assert set(data) == {"planets", "ascendant", "houses", "aspects", "interpretation"}


def test_repeated_generation_is_identical(make_chart):
    a = make_chart({"SUN": 10.0, "MOON": 200.0, "VENUS": 33.0}, ascendant=12.0)
    b = make_chart({"SUN": 50.0, "MOON": 20.0, "VENUS": 300.0}, ascendant=250.0)
    assert generate_composite(a, b).to_dict() == generate_composite(a, b).to_dict()
