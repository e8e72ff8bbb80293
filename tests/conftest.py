"""Shared pytest fixtures and helpers for building Notion response text."""

import json

import pytest


def to_text(obj) -> str:
    """Serialize like the Notion API does (compact, key order preserved)."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def rich_text(content: str) -> list[dict]:
    """Build a one-segment rich_text array."""
    return [
        {
            "type": "text",
            "text": {"content": content, "link": None},
            "annotations": {
                "bold": False,
                "italic": False,
                "strikethrough": False,
                "underline": False,
                "code": False,
                "color": "default",
            },
            "plain_text": content,
            "href": None,
        }
    ]


def make_database(db_id: str | None, title: str | None) -> dict:
    """Build a database object as returned by the search endpoint."""
    db: dict = {"object": "database"}
    if db_id is not None:
        db["id"] = db_id
    db["title"] = rich_text(title) if title else []
    db["properties"] = {
        "Name": {"id": "title", "name": "Name", "type": "title", "title": {}},
    }
    return db


def make_page(
    page_id: str,
    title: str = "Task one",
    parent: dict | None = None,
    title_property: str = "Name",
    extra_properties: dict | None = None,
) -> dict:
    """Build a page object with a title property and optional extras."""
    properties = dict(extra_properties or {})
    properties[title_property] = {"id": "title", "type": "title", "title": rich_text(title) if title else []}
    return {
        "object": "page",
        "id": page_id,
        "parent": parent or {"type": "database_id", "database_id": "db-1"},
        "archived": False,
        "properties": properties,
    }


def make_list(results: list[dict]) -> str:
    """Wrap objects in a list response and serialize it."""
    return to_text({"object": "list", "results": results, "next_cursor": None, "has_more": False})


@pytest.fixture
def task_page() -> dict:
    """A database page exercising every supported property kind."""
    return make_page(
        "2d240e6d-8f97-8077-8b8d-fd8dae6ed382",
        title="Write report",
        extra_properties={
            "Count": {"id": "a%3Db", "type": "number", "number": 5},
            "Status": {
                "id": "st",
                "type": "select",
                "select": {"id": "opt1", "name": "Done", "color": "green"},
            },
            "Tags": {
                "id": "tg",
                "type": "multi_select",
                "multi_select": [
                    {"id": "t1", "name": "A", "color": "red"},
                    {"id": "t2", "name": "B", "color": "blue"},
                ],
            },
            "Cover": {
                "id": "cv",
                "type": "files",
                "files": [
                    {
                        "name": "cover.png",
                        "type": "external",
                        "external": {"url": "https://example.com/cover.png"},
                    }
                ],
            },
            "Related": {
                "id": "rl",
                "type": "relation",
                "relation": [{"id": "page-1"}, {"id": "page-2"}],
                "has_more": False,
            },
            "Notes": {"id": "nt", "type": "rich_text", "rich_text": rich_text("Check the numbers")},
        },
    )


@pytest.fixture
def task_page_text(task_page) -> str:
    """The task page serialized as raw response text."""
    return to_text(task_page)
