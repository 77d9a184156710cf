"""Time-in-zone calculations for power and heart-rate sample streams."""

from typing import Optional, Sequence

import numpy as np

from models.training import HrZones, PowerZones, SampleStream, ZoneDistribution
from coaching.logger import get_logger

logger = get_logger(__name__)

# Lower bounds of zones 2..N as a fraction of threshold. A sample equal to a
# bound belongs to the zone above it.
POWER_ZONE_RATIOS = (0.55, 0.75, 0.90, 1.05, 1.20, 1.50)  # Coggan, % of FTP
HR_ZONE_RATIOS = (0.68, 0.83, 0.94, 1.03)  # % of LTHR


def _bucket_counts(samples: Sequence[Optional[float]], threshold: float, ratios: Sequence[float]) -> np.ndarray:
    """Count samples per zone, returning an array of len(ratios) + 1 buckets."""
    zone_count = len(ratios) + 1
    if not threshold or threshold <= 0 or samples is None or len(samples) == 0:
        return np.zeros(zone_count, dtype=int)

    values = np.array([0.0 if s is None else s for s in samples], dtype=float)
    bounds = np.array([threshold * r for r in ratios], dtype=float)

    zone_index = np.searchsorted(bounds, values, side="right")
    return np.bincount(zone_index, minlength=zone_count)


def compute_time_in_power_zones(watts: Sequence[Optional[float]], ftp: Optional[float]) -> PowerZones:
    """
    Compute time spent in each Coggan power zone (Z1-Z7).

    Each sample is one second at 1 Hz, so counts are seconds.

    Args:
        watts: Power samples in watts
        ftp: Functional Threshold Power

    Returns:
        PowerZones, all zero when FTP is missing/non-positive or there are no samples
    """
    counts = _bucket_counts(watts, ftp or 0, POWER_ZONE_RATIOS)
    zones = PowerZones(**{f"z{i + 1}": int(c) for i, c in enumerate(counts)})
    logger.debug(f"Power zones from {len(watts or [])} samples at FTP {ftp}: {zones.as_dict()}")
    return zones


def compute_time_in_hr_zones(heartrate: Sequence[Optional[float]], lthr: Optional[float]) -> HrZones:
    """
    Compute time spent in each heart-rate zone (Z1-Z5, % of LTHR).

    Args:
        heartrate: Heart-rate samples in bpm
        lthr: Lactate threshold heart rate

    Returns:
        HrZones, all zero when LTHR is missing/non-positive or there are no samples
    """
    counts = _bucket_counts(heartrate, lthr or 0, HR_ZONE_RATIOS)
    zones = HrZones(**{f"z{i + 1}": int(c) for i, c in enumerate(counts)})
    logger.debug(f"HR zones from {len(heartrate or [])} samples at LTHR {lthr}: {zones.as_dict()}")
    return zones


def compute_zones_from_streams(
    streams: Optional[SampleStream],
    ftp: Optional[float],
    lthr: Optional[float]
) -> Optional[ZoneDistribution]:
    """
    Pick the zone distribution for an activity's streams.

    Power zones are used whenever a non-empty power stream exists; heart-rate
    zones only as a fallback.

    Returns:
        Zone distribution, or None if neither stream has samples
    """
    if streams is None:
        return None
    if streams.has_power:
        return compute_time_in_power_zones(streams.watts, ftp)
    if streams.has_heartrate:
        return compute_time_in_hr_zones(streams.heartrate, lthr)
    return None
