# tests/test_endpoints.py
"""
Tests for activity, conversation and list endpoints.
"""

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs

import pytest

from avocado_client import Activity, ActivityType, AvocadoList, filter_activities, to_epoch_seconds
from conftest import make_activity

FEED_TYPES = ["message", "kiss", "hug", "list", "photo", "media", "activity", "couple", "user", "hug", "message"]


@pytest.fixture
def feed():
    return [make_activity(str(i), activity_type) for i, activity_type in enumerate(FEED_TYPES)]


class TestFilterActivities:
    """Tests for client-side activity filtering."""

    @pytest.mark.parametrize("activity_type", list(ActivityType))
    def test_keeps_only_matching_type_in_order(self, feed, activity_type):
        activities = [Activity.model_validate(item) for item in feed]

        result = filter_activities(activities, activity_type)

        expected = [a.id for a in activities if a.type == activity_type.value]
        assert [a.id for a in result] == expected
        assert all(a.type == activity_type.value for a in result)

    def test_accepts_plain_string_tag(self, feed):
        activities = [Activity.model_validate(item) for item in feed]

        assert [a.id for a in filter_activities(activities, "hug")] == ["2", "9"]

    @pytest.mark.parametrize("activity_type", [None, "Hug", "HUG", "poke", ""])
    def test_unrecognized_type_returns_everything(self, feed, activity_type):
        activities = [Activity.model_validate(item) for item in feed]

        assert filter_activities(activities, activity_type) == activities

    def test_unknown_feed_types_are_never_matched(self):
        activities = [Activity.model_validate(make_activity("1", "anniversary"))]

        assert filter_activities(activities, ActivityType.USER) == []


class TestActivities:
    """Tests for the activity endpoints."""

    async def test_activities_returns_array(self, logged_in, fake_api, feed):
        fake_api.add("GET", "activities/", status_code=200, json=feed)

        activities = await logged_in.activities()

        assert len(activities) == len(feed)
        assert all(isinstance(a, Activity) for a in activities)
        assert fake_api.last.url.query == b""

    async def test_activities_by_type_filters_latest_feed(self, logged_in, fake_api, feed):
        fake_api.add("GET", "activities/", status_code=200, json=feed)

        messages = await logged_in.activities_by_type(ActivityType.MESSAGE)

        assert [a.id for a in messages] == ["0", "10"]
        assert fake_api.last.url.path == "/api/activities/"

    async def test_activities_by_unknown_type_is_unfiltered(self, logged_in, fake_api, feed):
        fake_api.add("GET", "activities/", status_code=200, json=feed)

        assert len(await logged_in.activities_by_type("unknown")) == len(feed)

    async def test_activities_before_sends_epoch_seconds(self, logged_in, fake_api):
        fake_api.add("GET", "activities/", status_code=200, json=[])
        moment = datetime(2013, 1, 1, 12, 0, 0, 750000, tzinfo=timezone.utc)

        await logged_in.activities_before(moment)

        assert fake_api.last.url.params["before"] == "1357041600"
        assert "after" not in fake_api.last.url.params

    async def test_activities_after_sends_epoch_seconds(self, logged_in, fake_api):
        fake_api.add("GET", "activities/", status_code=200, json=[])

        await logged_in.activities_after(datetime(2013, 1, 1, tzinfo=timezone.utc))

        assert str(fake_api.last.url) == "https://avocado.io/api/activities/?after=1356998400"

    async def test_activities_after_accepts_timestamp(self, logged_in, fake_api):
        fake_api.add("GET", "activities/", status_code=200, json=[])

        await logged_in.activities_after(1357027200.9)

        assert fake_api.last.url.params["after"] == "1357027200"


class TestToEpochSeconds:
    """Tests for to_epoch_seconds."""

    def test_naive_datetime_is_utc(self):
        assert to_epoch_seconds(datetime(1970, 1, 2)) == 86400

    def test_aware_datetime_is_converted(self):
        plus_two = timezone(timedelta(hours=2))

        assert to_epoch_seconds(datetime(1970, 1, 2, 2, 0, tzinfo=plus_two)) == 86400

    def test_fraction_is_truncated(self):
        assert to_epoch_seconds(datetime(1970, 1, 1, 0, 0, 1, 999999)) == 1


class TestConversation:
    """Tests for message, hug and kiss."""

    async def test_message_posts_form(self, logged_in, fake_api):
        fake_api.add("POST", "conversation/", status_code=200)

        assert await logged_in.message("on my way & almost there") is True

        request = fake_api.last
        assert request.method == "POST"
        assert parse_qs(request.content.decode()) == {"message": ["on my way & almost there"]}

    async def test_hug_posts_without_body(self, logged_in, fake_api):
        fake_api.add("POST", "conversation/hug/", status_code=200)

        assert await logged_in.hug() is True

        assert fake_api.last.method == "POST"
        assert fake_api.last.content == b""

    async def test_kiss(self, logged_in, fake_api):
        fake_api.add("POST", "conversation/kiss/", status_code=200)

        assert await logged_in.kiss() is True

        assert fake_api.last.url.path == "/api/conversation/kiss/"


class TestLists:
    """Tests for list management."""

    @pytest.fixture
    def groceries(self):
        return {
            "id": "l1",
            "name": "Groceries",
            "createTime": 1354320000000,
            "items": [
                {"id": "i1", "text": "milk", "complete": False},
                {"id": "i2", "text": "eggs", "complete": True},
                {"id": "i3", "text": "bread", "deleted": True},
            ],
        }

    async def test_lists(self, logged_in, fake_api, groceries):
        fake_api.add("GET", "lists/", status_code=200, json=[groceries, {"id": "l2", "name": "Movies"}])

        lists = await logged_in.lists()

        assert [item.name for item in lists] == ["Groceries", "Movies"]
        assert all(isinstance(item, AvocadoList) for item in lists)

    async def test_get_list_takes_first_element(self, logged_in, fake_api, groceries):
        fake_api.add("GET", "lists/l1", status_code=200, json=[groceries])

        groceries_list = await logged_in.get_list("l1")

        assert groceries_list.id == "l1"
        assert [item.text for item in groceries_list.open_items()] == ["milk"]

    async def test_create_list(self, logged_in, fake_api):
        fake_api.add("POST", "lists/", status_code=200)

        assert await logged_in.create_list("Trips") is True

        assert parse_qs(fake_api.last.content.decode()) == {"name": ["Trips"]}

    async def test_rename_list(self, logged_in, fake_api):
        fake_api.add("POST", "lists/l1", status_code=200)

        assert await logged_in.rename_list("l1", "Food") is True

        assert fake_api.last.url.path == "/api/lists/l1"
        assert parse_qs(fake_api.last.content.decode()) == {"name": ["Food"]}

    async def test_delete_list(self, logged_in, fake_api):
        fake_api.add("POST", "lists/l1/delete", status_code=200)

        assert await logged_in.delete_list("l1") is True

        assert fake_api.last.method == "POST"
