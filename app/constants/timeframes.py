from enum import Enum
from typing import Dict, NamedTuple

class Timeframe(str, Enum):
    week = "7d"
    month = "30d"
    quarter = "90d"
    half_year = "180d"
    year = "1y"
    two_years = "2y"

class Granularity(str, Enum):
    day = "day"
    week = "week"
    month = "month"

class BucketSpec(NamedTuple):
    count: int
    granularity: Granularity
    days: int  # length of the window, used for transaction rollups

TIMEFRAME_BUCKETS: Dict[Timeframe, BucketSpec] = {
    Timeframe.week: BucketSpec(7, Granularity.day, 7),
    Timeframe.month: BucketSpec(30, Granularity.day, 30),
    Timeframe.quarter: BucketSpec(13, Granularity.week, 90),
    Timeframe.half_year: BucketSpec(6, Granularity.month, 180),
    Timeframe.year: BucketSpec(12, Granularity.month, 365),
    Timeframe.two_years: BucketSpec(24, Granularity.month, 730),
}

# Timeframes frozen into a public share
SHARE_TIMEFRAMES = (Timeframe.week, Timeframe.month, Timeframe.quarter, Timeframe.year)
DEFAULT_TIMEFRAME = Timeframe.month
