from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from user_stats import sorted_lengths

# Slices at or below this percentage are drawn without a text label
MIN_LABELLED_PERCENT = 1.0


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def chart_data(table: Mapping[str, float]) -> List[Dict[str, Any]]:
    """Convert a distribution table into label/value pairs for a chart."""
    return [{"label": str(label), "value": float(value)} for label, value in table.items()]


def pie_chart(data: List[Dict[str, Any]], title: str) -> Optional[go.Figure]:
    """Pie chart of label/value pairs, or None when there is nothing to draw."""
    filtered = [d for d in data if d["value"] > 0]
    if not filtered:
        return None

    df = pd.DataFrame(filtered)
    df["legend"] = [
        f"{label}: {format_percent(value)}" for label, value in zip(df["label"], df["value"])
    ]
    fig = px.pie(
        df,
        values="value",
        names="legend",
        title=title,
        color_discrete_sequence=px.colors.qualitative.D3,
    )
    fig.update_traces(
        text=[format_percent(v) if v > MIN_LABELLED_PERCENT else "" for v in df["value"]],
        textinfo="text",
        sort=False,
    )
    return fig


def progress_rows(table: Mapping[str, float]) -> List[Tuple[str, float, str]]:
    """(label, fraction for a progress bar, badge text) for each table entry."""
    rows = []
    for label, value in table.items():
        fraction = min(max(float(value) / 100, 0.0), 1.0)
        rows.append((str(label), fraction, format_percent(value)))
    return rows


def surname_length_frame(counts: Mapping[str, int]) -> pd.DataFrame:
    """Surname length table sorted by length, ready for st.dataframe."""
    lengths = sorted_lengths(dict(counts))
    return pd.DataFrame(
        {
            "Length": [f"{length} characters" for length in lengths],
            "Count": [int(counts[length]) for length in lengths],
        },
        columns=["Length", "Count"],
    )
