from rivals.models import Platform, UserProfile
from rivals.resolution import find_similar


def test_find_similar_by_name_and_handle():
    existing = [
        UserProfile(id="1", display_name="Gennady Korotkevich", handles={Platform.CODEFORCES: "tourist"}),
        UserProfile(id="2", display_name="Petr Mitrichev"),
    ]

    assert [p.id for p in find_similar(existing, "korotkevich gennady")] == ["1"]
    assert [p.id for p in find_similar(existing, "Someone", {Platform.CODEFORCES: "Tourist"})] == ["1"]
    assert find_similar(existing, "Alice Liddell") == []
