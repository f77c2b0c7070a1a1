"""
Topic queries: owner scoping, filters, root-only sentinel, pagination metadata, children_count.
"""
import uuid

import pytest

from app.errors import NotFoundError
from app.services import topic_repository
from app.services.topic_repository import TopicFilters


def test_roots_only_and_children(db, owner_id, make_topic):
    """Root listing returns the root with its child count; children lists only direct children."""
    root = make_topic(owner_id, title="root1")
    child = make_topic(owner_id, title="child1", parent_id=root.id)
    make_topic(owner_id, title="grandchild1", parent_id=child.id)

    rows, total = topic_repository.list_topics(db, owner_id, TopicFilters(roots_only=True))
    assert total == 1
    assert [(t.id, n) for t, n in rows] == [(root.id, 1)]

    children = topic_repository.get_children(db, owner_id, root.id)
    assert [(t.id, n) for t, n in children] == [(child.id, 1)]


def test_list_is_owner_scoped(db, owner_id, other_owner_id, make_topic):
    make_topic(owner_id, title="mine")
    make_topic(other_owner_id, title="theirs")
    rows, total = topic_repository.list_topics(db, owner_id)
    assert total == 1
    assert rows[0][0].title == "mine"


def test_filters_status_technology_and_parent(db, owner_id, make_topic):
    root = make_topic(owner_id, title="root", technology="Python")
    make_topic(owner_id, title="a", technology="Python", status="completed", parent_id=root.id)
    make_topic(owner_id, title="b", technology="Go", status="completed")
    make_topic(owner_id, title="c", technology="Python", status="in_progress", parent_id=root.id)

    rows, total = topic_repository.list_topics(db, owner_id, TopicFilters(status="completed", technology="Python"))
    assert total == 1
    assert rows[0][0].title == "a"

    rows, total = topic_repository.list_topics(db, owner_id, TopicFilters(parent_id=root.id), sort="title", order="asc")
    assert total == 2
    assert [t.title for t, _ in rows] == ["a", "c"]


def test_pagination_total_uses_filter(db, owner_id, make_topic):
    for i in range(5):
        make_topic(owner_id, title=f"t{i}", technology="Rust")
    make_topic(owner_id, title="other", technology="Go")

    rows, total = topic_repository.list_topics(
        db, owner_id, TopicFilters(technology="Rust"), sort="title", order="asc", page=3, page_size=2
    )
    assert total == 5
    assert [t.title for t, _ in rows] == ["t4"]
    assert topic_repository.total_pages(total, 2) == 3


def test_pages_do_not_overlap(db, owner_id, make_topic):
    for i in range(6):
        make_topic(owner_id, title="same title")
    seen = []
    for page in (1, 2, 3):
        rows, _ = topic_repository.list_topics(db, owner_id, sort="title", order="asc", page=page, page_size=2)
        seen.extend(t.id for t, _ in rows)
    assert len(seen) == len(set(seen)) == 6


def test_empty_list_is_not_an_error(db, owner_id):
    assert topic_repository.list_topics(db, owner_id) == ([], 0)


def test_page_past_end_is_empty(db, owner_id, make_topic):
    make_topic(owner_id)
    rows, total = topic_repository.list_topics(db, owner_id, page=5, page_size=10)
    assert rows == []
    assert total == 1


def test_get_children_hides_other_owners_parent(db, owner_id, other_owner_id, make_topic):
    theirs = make_topic(other_owner_id, title="theirs")
    with pytest.raises(NotFoundError):
        topic_repository.get_children(db, owner_id, theirs.id)
    with pytest.raises(NotFoundError):
        topic_repository.get_children(db, owner_id, uuid.uuid4())


def test_get_with_children_count(db, owner_id, make_topic):
    root = make_topic(owner_id)
    make_topic(owner_id, parent_id=root.id)
    make_topic(owner_id, parent_id=root.id)
    topic, count = topic_repository.get_with_children_count(db, owner_id, root.id)
    assert topic.id == root.id
    assert count == 2


def test_completed_titles_for_technology(db, owner_id, make_topic):
    make_topic(owner_id, title="done py", technology="Python", status="completed")
    make_topic(owner_id, title="open py", technology="Python")
    make_topic(owner_id, title="done go", technology="Go", status="completed")
    assert topic_repository.completed_titles(db, owner_id, "Python", limit=10) == ["done py"]


def test_children_count_follows_deletes(db, owner_id, make_topic):
    from app.services import topic_service

    root = make_topic(owner_id, title="root")
    keep = make_topic(owner_id, title="keep", parent_id=root.id)
    drop = make_topic(owner_id, title="drop", parent_id=root.id)
    make_topic(owner_id, title="grandchild", parent_id=drop.id)
    assert topic_repository.get_with_children_count(db, owner_id, root.id)[1] == 2

    topic_service.delete_topic(db, owner_id, drop.id)

    assert topic_repository.get_with_children_count(db, owner_id, root.id)[1] == 1
    rows, total = topic_repository.list_topics(db, owner_id, sort="title", order="asc")
    assert total == 2
    assert [(t.id, n) for t, n in rows] == [(keep.id, 0), (root.id, 1)]

    topic_service.delete_topic(db, owner_id, keep.id)
    assert topic_repository.get_with_children_count(db, owner_id, root.id)[1] == 0
