from rivals.merge import merge_histories, unified_activity
from rivals.models import DailyActivityRecord, ManualLog, Platform, PlatformStats, UserProfile


def _history(**days):
    return [DailyActivityRecord(date=d, count=c) for d, c in days.items()]


def test_merge_sums_counts_per_date():
    a = [DailyActivityRecord("2024-01-01", 2)]
    b = [DailyActivityRecord("2024-01-01", 3), DailyActivityRecord("2024-01-02", 1)]

    assert merge_histories([a, b]) == {"2024-01-01": 5, "2024-01-02": 1}


def test_merge_of_nothing_is_empty():
    assert merge_histories([]) == {}
    assert merge_histories([[], []]) == {}


def test_unified_activity_without_platforms_is_empty():
    assert unified_activity(UserProfile(id="1", display_name="Nobody")) == {}


def test_unified_activity_adds_manual_logs():
    p = UserProfile(
        id="1",
        display_name="Ann",
        stats={
            Platform.CODEFORCES: PlatformStats(3, [DailyActivityRecord("2024-01-01", 3)]),
            Platform.LEETCODE: PlatformStats(9, [DailyActivityRecord("2024-01-01", 1)]),
        },
        manual_logs=[ManualLog("2024-01-01", "cses"), ManualLog("2024-01-03")],
    )

    assert unified_activity(p) == {"2024-01-01": 5, "2024-01-03": 1}
