"""Window statistics over raw activities."""

from typing import Optional, Sequence

import pandas as pd

from models.training import ActivityStats, RawActivity


def activities_to_frame(activities: Sequence[RawActivity]) -> pd.DataFrame:
    """
    Tabulate activity summaries.

    Returns:
        DataFrame with one row per activity
    """
    rows = [
        {
            "activity_id": a.id,
            "date": a.start_date,
            "type": a.type,
            "distance": a.distance or 0.0,
            "moving_time": a.moving_time or 0,
            "average_power": a.average_power,
            "average_heartrate": a.average_heartrate,
        }
        for a in activities
    ]
    return pd.DataFrame(
        rows,
        columns=["activity_id", "date", "type", "distance", "moving_time", "average_power", "average_heartrate"],
    )


def _mean_or_none(series: pd.Series) -> Optional[float]:
    values = pd.to_numeric(series, errors="coerce").dropna()
    values = values[values > 0]
    if values.empty:
        return None
    return round(float(values.mean()), 1)


def summarize_activities(activities: Sequence[RawActivity]) -> ActivityStats:
    """
    Totals and averages for a window of activities.

    Averages only include activities that recorded the metric.
    """
    df = activities_to_frame(activities)
    if df.empty:
        return ActivityStats()

    return ActivityStats(
        total_activities=len(df),
        total_distance=float(df["distance"].sum()),
        total_time=float(df["moving_time"].sum()),
        avg_power=_mean_or_none(df["average_power"]),
        avg_heartrate=_mean_or_none(df["average_heartrate"]),
    )
