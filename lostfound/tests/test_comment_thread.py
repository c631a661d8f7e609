"""
Tests for the client-side comment tree: the pure tree helpers and CommentThread
driven against the real API through TestClient.
"""

import httpx
import pytest
from fastapi.testclient import TestClient
from lostfound.main import app
from lostfound.client import Session
from lostfound.comments import tree
from lostfound.comments.thread import CommentThread

client = TestClient(app)


def node(id, replies=None, likes=0, liked=False, user_id="u1"):
    return {"id": id, "user_id": user_id, "content": id, "likes_count": likes, "is_liked": liked, "replies": replies or []}


@pytest.fixture
def sample_tree():
    #  a ─ a1 ─ a1x
    #    └ a2
    #  b
    return [
        node("a", [node("a1", [node("a1x")]), node("a2")]),
        node("b"),
    ]


class FailingHttp:
    """Stands in for httpx.Client and answers every request with a 500."""

    def __init__(self):
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url))
        return httpx.Response(500, json={"detail": "server exploded"})


class UnreachableHttp:
    """Stands in for httpx.Client when the server cannot be reached at all."""

    def request(self, method, url, **kwargs):
        raise httpx.ConnectError("connection refused", request=httpx.Request(method, url))


# --- Tree helpers ---

def test_find_and_depth(sample_tree):
    assert tree.find_comment(sample_tree, "a1x")["id"] == "a1x"
    assert tree.find_comment(sample_tree, "zzz") is None
    assert tree.comment_depth(sample_tree, "a") == 0
    assert tree.comment_depth(sample_tree, "a1x") == 2
    assert tree.comment_depth(sample_tree, "zzz") is None


def test_insert_reply_at_depth_leaves_siblings(sample_tree):
    result = tree.insert_reply(sample_tree, "a1x", node("new"))
    assert tree.find_comment(result, "a1x")["replies"][0]["id"] == "new"
    assert tree.find_comment(result, "a2") == tree.find_comment(sample_tree, "a2")
    assert result[1] == sample_tree[1]
    # input untouched
    assert tree.find_comment(sample_tree, "a1x")["replies"] == []


def test_remove_comment_drops_subtree(sample_tree):
    result = tree.remove_comment(sample_tree, "a1")
    assert tree.find_comment(result, "a1") is None
    assert tree.find_comment(result, "a1x") is None
    assert [r["id"] for r in result[0]["replies"]] == ["a2"]


def test_toggle_like_twice_restores(sample_tree):
    once = tree.toggle_like(sample_tree, "a1x")
    assert tree.find_comment(once, "a1x")["is_liked"] is True
    assert tree.find_comment(once, "a1x")["likes_count"] == 1
    twice = tree.toggle_like(once, "a1x")
    assert tree.find_comment(twice, "a1x") == tree.find_comment(sample_tree, "a1x")


def test_walk_is_display_order(sample_tree):
    assert [(d, c["id"]) for d, c in tree.walk(sample_tree)] == [
        (0, "a"), (1, "a1"), (2, "a1x"), (1, "a2"), (0, "b"),
    ]


# --- CommentThread against the API ---

@pytest.fixture
def session_for(make_user):
    def _session(username="viewer", role="member", locale="en"):
        user, token = make_user(username, role=role)
        return Session(http=client, token=token, user_id=user["user_id"], role=role, locale=locale)
    return _session


@pytest.fixture
def report(approved_report):
    return approved_report()


def test_submit_hello_from_empty(session_for, report):
    thread = CommentThread(session_for(), report["id"])
    assert thread.fetch_page().ok
    assert thread.comments == []

    result = thread.add("Hello")
    assert result.ok
    assert len(thread.comments) == 1
    assert thread.comments[0]["content"] == "Hello"
    assert thread.comments[0]["parent_comment_id"] is None
    assert thread.total == 1


def test_top_level_add_prepends_and_counts(session_for, report):
    session = session_for()
    thread = CommentThread(session, report["id"])
    thread.add("older")
    thread.add("newer")
    assert [c["content"] for c in thread.comments] == ["newer", "older"]
    assert thread.total == 2


def test_reply_lands_under_target_at_any_depth(session_for, report):
    thread = CommentThread(session_for(), report["id"])
    thread.add("root")
    thread.add("sibling")
    root_id = thread.comments[1]["id"]

    thread.set_reply_target(root_id)
    assert thread.state == "replying"
    thread.add("child")
    assert thread.state == "idle"
    child_id = tree.find_comment(thread.comments, root_id)["replies"][0]["id"]

    sibling_before = thread.comments[0]
    thread.set_reply_target(child_id)
    thread.add("grandchild")

    grandchild = tree.find_comment(thread.comments, child_id)["replies"][0]
    assert grandchild["content"] == "grandchild"
    assert grandchild["parent_comment_id"] == child_id
    assert thread.comments[0] == sibling_before
    assert thread.total == 2

    # the server agrees with the local tree
    fresh = CommentThread(thread.session, report["id"])
    fresh.fetch_page()
    assert tree.comment_depth(fresh.comments, grandchild["id"]) == 2


def test_delete_removes_subtree_and_decrements_by_one(session_for, report):
    thread = CommentThread(session_for(), report["id"])
    thread.add("keep")
    thread.add("doomed")
    doomed = thread.comments[0]["id"]
    thread.set_reply_target(doomed)
    thread.add("reply 1")
    reply = tree.find_comment(thread.comments, doomed)["replies"][0]["id"]
    thread.set_reply_target(reply)
    thread.add("reply 2")

    assert thread.delete(doomed).ok
    assert [c["content"] for c in thread.comments] == ["keep"]
    assert tree.find_comment(thread.comments, reply) is None
    assert thread.total == 1


def test_like_unlike_twice_round_trip(session_for, report):
    author = CommentThread(session_for("author"), report["id"])
    author.add("like me")

    viewer = CommentThread(session_for("fan"), report["id"])
    viewer.fetch_page()
    comment_id = viewer.comments[0]["id"]
    for _ in range(2):
        assert viewer.toggle_like(comment_id).ok
        assert viewer.comments[0]["is_liked"] is True
        assert viewer.comments[0]["likes_count"] == 1
        assert viewer.toggle_like(comment_id).ok
    assert viewer.comments[0]["likes_count"] == 0
    assert viewer.comments[0]["is_liked"] is False


def test_failed_like_is_rolled_back():
    session = Session(http=FailingHttp(), token="t", user_id="me")
    thread = CommentThread(session, "r1")
    thread.comments = [node("c1", likes=4)]
    result = thread.toggle_like("c1")
    assert not result.ok
    assert result.error == "server exploded"
    assert thread.comments[0]["likes_count"] == 4
    assert thread.comments[0]["is_liked"] is False


@pytest.mark.parametrize("liked,likes", [(False, 0), (True, 3)])
def test_like_rolled_back_when_request_raises(liked, likes):
    session = Session(http=UnreachableHttp(), token="t", user_id="me")
    thread = CommentThread(session, "r1")
    thread.comments = [node("c1", likes=likes, liked=liked)]
    result = thread.toggle_like("c1")
    assert not result.ok
    assert result.error == "Something went wrong. Please try again."
    assert thread.comments[0]["is_liked"] is liked
    assert thread.comments[0]["likes_count"] == likes


def test_delete_survives_unreachable_server():
    session = Session(http=UnreachableHttp(), token="t", user_id="me")
    thread = CommentThread(session, "r1")
    thread.comments = [node("c1"), node("c2")]
    thread.total = 2
    result = thread.delete("c1")
    assert not result.ok
    assert [c["id"] for c in thread.comments] == ["c1", "c2"]
    assert thread.total == 2


def test_fetch_survives_unreachable_server():
    thread = CommentThread(Session(http=UnreachableHttp(), locale="ar"), "r1")
    result = thread.fetch_page()
    assert not result.ok
    assert thread.error == "حدث خطأ ما. يرجى المحاولة مرة أخرى."
    assert thread.loading is False


def test_fetch_failure_sets_error_and_stops_loading():
    thread = CommentThread(Session(http=FailingHttp()), "r1")
    result = thread.fetch_page()
    assert not result.ok
    assert thread.error == "server exploded"
    assert thread.loading is False


def test_add_failure_is_surfaced_not_raised():
    session = Session(http=FailingHttp(), token="t", user_id="me")
    thread = CommentThread(session, "r1")
    result = thread.add("hi")
    assert not result.ok
    assert thread.error == "server exploded"
    assert thread.comments == []


def test_add_rejects_empty_and_anonymous():
    http = FailingHttp()
    signed_in = CommentThread(Session(http=http, token="t", user_id="me"), "r1")
    assert not signed_in.add("   ").ok
    anonymous = CommentThread(Session(http=http), "r1")
    assert not anonymous.add("hello").ok
    assert http.calls == []


def test_reply_target_toggles():
    thread = CommentThread(Session(http=FailingHttp(), token="t", user_id="me"), "r1")
    thread.draft = "half typed"
    thread.set_reply_target("x")
    assert thread.reply_to == "x"
    thread.set_reply_target("y")
    assert thread.reply_to == "y"
    thread.set_reply_target("y")
    assert thread.reply_to is None
    assert thread.draft == ""


def test_render_actions_respect_depth_cap():
    session = Session(http=FailingHttp(), token="t", user_id="u1")
    thread = CommentThread(session, "r1", max_depth=3)
    thread.comments = [node("d0", [node("d1", [node("d2", [node("d3", user_id="u2")])])])]
    rows = {row["id"]: row for row in thread.render()}
    assert rows["d2"]["depth"] == 2
    assert "reply" in rows["d2"]["actions"]
    assert rows["d3"]["depth"] == 3
    assert "reply" not in rows["d3"]["actions"]
    assert "delete" not in rows["d3"]["actions"]
    assert rows["d0"]["actions"] == ["like", "reply", "delete"]


def test_render_for_admin_and_anonymous():
    admin = CommentThread(Session(http=FailingHttp(), token="t", user_id="boss", role="moderator"), "r1")
    admin.comments = [node("c", user_id="someone")]
    assert "delete" in admin.render()[0]["actions"]

    anonymous = CommentThread(Session(http=FailingHttp()), "r1")
    anonymous.comments = [node("c")]
    assert anonymous.render()[0]["actions"] == []


def test_render_names_missing_author_in_viewer_language():
    thread = CommentThread(Session(http=FailingHttp(), locale="ar"), "r1")
    thread.comments = [node("c"), {**node("d"), "user": {"full_name": "Nora Saleh"}}]
    assert [row["author"] for row in thread.render()] == ["مجهول", "Nora Saleh"]


def test_paging_appends(session_for, report):
    session = session_for()
    writer = CommentThread(session, report["id"])
    for i in range(12):
        writer.add(f"comment {i}")

    reader = CommentThread(session, report["id"])
    reader.fetch_page()
    assert len(reader.comments) == 10
    assert reader.has_more is True
    reader.fetch_page()
    assert len(reader.comments) == 12
    assert reader.has_more is False
    assert reader.total == 12
