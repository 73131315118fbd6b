"""Tests for the client data layer."""

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from taskboard.client import ApiError, NotAuthenticated, TaskboardClient


def _signed_in(api_client, username="carol"):
    api_client.register(username, "password123")
    return api_client


class TestSession:
    def test_register_keeps_token(self, api_client):
        user = api_client.register("carol", "password123")
        assert api_client.is_authenticated
        assert api_client.user_id == user["id"]

    def test_login_keeps_token(self, api_client, user):
        api_client.login("alice", "password123")
        assert api_client.is_authenticated
        assert api_client.user_id == user.id

    def test_login_failure_raises_api_error(self, api_client, user):
        with pytest.raises(ApiError) as excinfo:
            api_client.login("alice", "nope")
        assert excinfo.value.status_code == 400
        assert excinfo.value.message == "Invalid username or password"
        assert not api_client.is_authenticated

    def test_logout_clears_session(self, api_client):
        _signed_in(api_client).tasks()
        api_client.logout()
        assert not api_client.is_authenticated
        assert api_client.is_stale

    def test_task_calls_need_token(self, api_client):
        with pytest.raises(NotAuthenticated):
            api_client.tasks()
        assert api_client.session.calls == []


class TestCache:
    def test_tasks_fetched_once(self, api_client):
        _signed_in(api_client)
        api_client.tasks()
        api_client.tasks()
        assert api_client.session.calls.count(("GET", "/tasks")) == 1

    @pytest.mark.parametrize("mutation", ["edit", "status", "remove"])
    def test_mutations_invalidate_cache(self, api_client, mutation):
        _signed_in(api_client)
        task = api_client.add_task("Buy milk")
        assert api_client.is_stale
        api_client.tasks()
        assert not api_client.is_stale

        if mutation == "edit":
            api_client.edit_task(task["id"], title="Buy oat milk")
        elif mutation == "status":
            api_client.change_status(task["id"], "done")
        else:
            api_client.remove_task(task["id"])

        assert api_client.is_stale

    def test_failed_mutation_keeps_cache(self, api_client):
        _signed_in(api_client)
        api_client.add_task("Buy milk")
        cached = api_client.tasks()

        with pytest.raises(ApiError) as excinfo:
            api_client.edit_task(9999, title="ghost")

        assert excinfo.value.status_code == 404
        assert api_client.tasks() is cached


class TestBoardOperations:
    def test_add_and_group(self, api_client):
        _signed_in(api_client)
        api_client.add_task("A")
        api_client.add_task("B")
        api_client.add_task("C", status="done", deadline=date(2030, 1, 1), list="work")

        columns = api_client.board()
        assert [t["title"] for t in columns["todo"]] == ["A", "B"]
        assert columns["done"][0]["deadline"] == "2030-01-01"
        assert columns["done"][0]["list"] == "work"

    def test_move_task_sends_client_computed_order(self, api_client):
        _signed_in(api_client)
        a = api_client.add_task("A")
        api_client.add_task("B")
        api_client.add_task("Done already", status="done")

        moved = api_client.move_task(a["id"], "done")

        assert moved["status"] == "done"
        assert moved["order"] == 1
        by_title = {t["title"]: t for t in api_client.tasks()}
        assert by_title["B"]["status"] == "todo"

    def test_move_to_same_column_is_noop(self, api_client):
        _signed_in(api_client)
        a = api_client.add_task("A")
        calls_before = len(api_client.session.calls)

        assert api_client.move_task(a["id"], "todo") is None
        # only the cache refill happened
        assert api_client.session.calls[calls_before:] == [("GET", "/tasks")]


class TestTransportErrors:
    def test_network_failure_surfaces_immediately(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("connection refused")
        client = TaskboardClient("http://api.test", token="t", session=session)

        with pytest.raises(ApiError) as excinfo:
            client.tasks()

        assert excinfo.value.status_code is None
        assert session.request.call_count == 1

    def test_non_json_error_body(self):
        response = MagicMock(ok=False, status_code=502, text="Bad Gateway")
        response.json.side_effect = ValueError("not json")
        session = MagicMock()
        session.request.return_value = response
        client = TaskboardClient("http://api.test/", token="t", session=session)

        with pytest.raises(ApiError) as excinfo:
            client.remove_task(1)

        assert excinfo.value.status_code == 502
        assert excinfo.value.message == "Bad Gateway"

    def test_request_shape(self):
        response = MagicMock(ok=True, status_code=200)
        response.json.return_value = []
        session = MagicMock()
        session.request.return_value = response
        client = TaskboardClient("http://api.test/", token="secret", session=session, timeout=3)

        client.refresh()

        session.request.assert_called_once_with(
            "GET",
            "http://api.test/tasks",
            json=None,
            headers={"Content-Type": "application/json", "Authorization": "Bearer secret"},
            timeout=3,
        )
