import pytest

import dicebot
import dicebot.functions as functions
from dicebot.distribution import Distribution


def test_describe():
    text = functions.describe(Distribution({1: 0.25, 2: 0.75}))
    lines = text.splitlines()

    assert lines[0] == "1      25%  " + "#" * 10
    assert lines[1] == "2      75%  " + "#" * 30
    assert lines[-1] == "min 1, max 2, mean 1.75, stddev 0.43"


def test_describe_point():
    assert functions.describe(dicebot.distribution("3")).splitlines()[-1] == (
        "min 3, max 3, mean 3, stddev 0"
    )


def test_probability_frame():
    frame = functions.probability_frame(
        {
            "1d4": dicebot.distribution("1d4"),
            "1d2 + 1": dicebot.distribution("1d2 + 1"),
        }
    )

    assert list(frame.columns) == ["value", "1d4", "1d2 + 1"]
    assert list(frame["value"]) == ["1", "2", "3", "4"]
    assert list(frame["1d4"]) == pytest.approx([0.25] * 4)
    assert list(frame["1d2 + 1"]) == pytest.approx([0.0, 0.5, 0.5, 0.0])
