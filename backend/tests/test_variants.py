"""Tests for option combination generation."""
from types import SimpleNamespace

from dairycart.services.variants import OptionGroup, generate_combinations


def _group(name, *values):
    return OptionGroup(
        name=name,
        values=[SimpleNamespace(id=i + 1, value=v) for i, v in enumerate(values)],
    )


def test_every_combination_is_generated_once():
    groups = [
        _group("Size", "small", "medium", "large"),
        _group("Color", "red", "green", "blue"),
        _group("Fit", "slim", "regular"),
    ]

    combinations = generate_combinations(groups)

    assert len(combinations) == 3 * 3 * 2
    keys = {tuple(v.value for v in c.values) for c in combinations}
    assert len(keys) == len(combinations)
    for combination in combinations:
        assert combination.option_names == ("Size", "Color", "Fit")
        assert len(combination.values) == 3


def test_first_option_varies_slowest():
    groups = [_group("Size", "small", "medium"), _group("Color", "red", "blue")]

    suffixes = [c.sku_suffix for c in generate_combinations(groups)]

    assert suffixes == ["small_red", "small_blue", "medium_red", "medium_blue"]


def test_output_is_deterministic():
    groups = [_group("Size", "small", "medium"), _group("Color", "red", "blue")]

    first = [(c.index, c.sku_suffix, c.summary) for c in generate_combinations(groups)]
    second = [(c.index, c.sku_suffix, c.summary) for c in generate_combinations(groups)]

    assert first == second
    assert [index for index, _, _ in first] == [0, 1, 2, 3]


def test_suffix_and_summary_format():
    groups = [_group("Size", "Small"), _group("Color", "Red")]

    (combination,) = generate_combinations(groups)

    assert combination.sku_suffix == "small_red"
    assert combination.summary == "Size: Small, Color: Red"
    assert combination.option_value_ids == [1, 1]


def test_single_value_options():
    groups = [_group("Size", "small"), _group("Color", "red")]

    combinations = generate_combinations(groups)

    assert len(combinations) == 1
    assert combinations[0].summary == "Size: small, Color: red"


def test_single_option():
    combinations = generate_combinations([_group("Size", "small", "medium", "large")])

    assert [c.sku_suffix for c in combinations] == ["small", "medium", "large"]
    assert combinations[1].summary == "Size: medium"


def test_no_options_yields_nothing():
    assert generate_combinations([]) == []
