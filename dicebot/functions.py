import io
import typing

import pandas
import plotly.express as px

from dicebot.distribution import Distribution

BAR_WIDTH = 30


class _Number(float):
    def __repr__(self) -> str:
        result = f"{float(self):.2f}"
        if result.endswith(".00"):
            result = result[:-3]
        return result

    __str__ = __repr__


class _Percentage(float):
    def __repr__(self) -> str:
        return f"{_Number(self*100)}%"

    __str__ = __repr__


def describe(distribution: Distribution) -> str:
    """Renders a distribution as a text table followed by summary statistics."""
    items = distribution.items()
    peak = max(value for _, value in items)
    width = max(len(str(key)) for key, _ in items)
    lines = []
    for key, value in items:
        bar = "#" * round(BAR_WIDTH * value / peak) if peak > 0 else ""
        lines.append(
            ("%" + str(width) + "s  %7s  %s") % (key, _Percentage(value), bar)
        )
    lines.append("")
    lines.append(
        "min %s, max %s, mean %s, stddev %s"
        % (
            distribution.min(),
            distribution.max(),
            _Number(distribution.mean()),
            _Number(distribution.stddev()),
        )
    )
    return "\n".join(lines)


def probability_frame(distributions: typing.Dict[str, Distribution]) -> pandas.DataFrame:
    """One row per possible value, one column per labelled distribution."""
    possible_values = set()
    for distribution in distributions.values():
        possible_values.update(distribution.keys())
    possible_values = sorted(possible_values)

    columns = {"value": [str(x) for x in possible_values]}
    for label, distribution in distributions.items():
        columns[label] = [distribution.get(value) for value in possible_values]
    return pandas.DataFrame(columns)


def plot(distributions: typing.Dict[str, Distribution]) -> bytes:
    data = probability_frame(distributions)
    fig = px.bar(data, x=data.columns[0], y=list(data.columns[1:]), barmode="overlay")
    fig.update_xaxes(title_text="value")
    fig.update_yaxes(title_text="probability", tickformat="%")
    stream = io.BytesIO()
    fig.write_image(file=stream, format="png")
    return stream.getvalue()
