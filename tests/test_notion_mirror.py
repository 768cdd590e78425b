"""
Tests for the Notion plan mirror.

Covers:
- Summary building (title, exercise flattening, duration)
- Properties adapt to the target database's schema
- Failures and missing configuration come back as MirrorResult, never raised
"""

import json
from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

from services.notion_mirror import (
    NOTION_RICH_TEXT_LIMIT,
    MirrorSummary,
    NotionMirror,
    build_mirror_summary,
)

PLAN_DATE = date(2026, 3, 2)


def _summary(**overrides):
    values = dict(
        title="Personal Training Session - 02/03/2026",
        type="Personal Training",
        date="02/03/2026",
        duration="45 minutes",
        fitness_level="intermediate",
        exercises="Goblet Squat, Kettlebell Swing; Dumbbell Row",
        equipment="Dumbbells, Kettlebells",
    )
    values.update(overrides)
    return MirrorSummary(**values)


class TestSummary:

    def test_build_summary(self, plan_content):
        summary = build_mirror_summary(
            plan_content,
            title="Ignored title",
            session_type="personal",
            fitness_level="intermediate",
            plan_date=PLAN_DATE,
            default_minutes=45,
        )
        assert summary.title == "Personal Training Session - 02/03/2026"
        assert summary.type == "Personal Training"
        assert summary.date == "02/03/2026"
        assert summary.duration == "45 minutes"
        assert summary.exercises == "Goblet Squat, Kettlebell Swing; Dumbbell Row"
        assert summary.equipment == "Dumbbells, Kettlebells"

    def test_summary_falls_back_to_plan_title(self):
        summary = build_mirror_summary(
            {"mainWorkout": [], "equipmentNeeded": []},
            title="Beginner Group Workout",
            session_type="group",
            fitness_level="beginner",
            plan_date=PLAN_DATE,
            default_minutes=30,
        )
        assert summary.title == "Beginner Group Workout - 02/03/2026"
        assert summary.type == "Group Class"
        assert summary.duration == "30 minutes"
        assert summary.exercises == ""


class TestProperties:

    def test_only_name_when_database_has_nothing_else(self):
        mirror = NotionMirror(client=MagicMock(), database_id="db")
        props = mirror.build_properties({"properties": {}}, _summary(), trainer_id="t1", plan_date=PLAN_DATE)
        assert list(props) == ["Name"]
        assert props["Name"]["title"][0]["text"]["content"] == "Personal Training Session - 02/03/2026"

    def test_all_matching_properties(self):
        schema = {"properties": {
            "Name": {"type": "title"},
            "Content": {"type": "rich_text"},
            "Type": {"type": "select"},
            "Date": {"type": "date"},
            "User ID": {"type": "rich_text"},
        }}
        mirror = NotionMirror(client=MagicMock(), database_id="db")
        props = mirror.build_properties(schema, _summary(), trainer_id="t1", plan_date=PLAN_DATE)

        assert props["Type"] == {"select": {"name": "Workout Plan"}}
        assert props["Date"] == {"date": {"start": "2026-03-02"}}
        assert props["User ID"]["rich_text"][0]["text"]["content"] == "t1"
        content = json.loads(props["Content"]["rich_text"][0]["text"]["content"])
        assert content["fitness_level"] == "intermediate"

    def test_mismatched_types_skipped(self):
        schema = {"properties": {"Type": {"type": "rich_text"}, "Date": {"type": "rich_text"}}}
        mirror = NotionMirror(client=MagicMock(), database_id="db")
        props = mirror.build_properties(schema, _summary(), trainer_id="t1", plan_date=PLAN_DATE)
        assert "Type" not in props
        assert "Date" not in props

    def test_content_truncated(self):
        schema = {"properties": {"Content": {"type": "rich_text"}}}
        mirror = NotionMirror(client=MagicMock(), database_id="db")
        props = mirror.build_properties(
            schema, _summary(exercises="x" * 5000), trainer_id="t1", plan_date=PLAN_DATE,
        )
        assert len(props["Content"]["rich_text"][0]["text"]["content"]) == NOTION_RICH_TEXT_LIMIT


class TestMirrorPlan:

    def test_success_returns_page_id(self):
        client = MagicMock()
        client.databases.retrieve.return_value = {"properties": {"Name": {"type": "title"}}}
        client.pages.create.return_value = {"id": "page-123"}

        result = NotionMirror(client, "db-1").mirror_plan(_summary(), trainer_id="t1", plan_date=PLAN_DATE)

        assert result.ok
        assert result.page_id == "page-123"
        assert client.pages.create.call_args.kwargs["parent"] == {"database_id": "db-1"}

    def test_api_failure_is_reported_not_raised(self):
        client = MagicMock()
        client.databases.retrieve.side_effect = RuntimeError("Notion is down")

        result = NotionMirror(client, "db-1").mirror_plan(_summary(), trainer_id="t1", plan_date=PLAN_DATE)

        assert not result.ok
        assert result.page_id is None
        assert "Notion is down" in result.error
        client.pages.create.assert_not_called()

    def test_disabled_mirror_does_no_io(self):
        mirror = NotionMirror(client=None, database_id=None)
        result = mirror.mirror_plan(_summary(), trainer_id="t1", plan_date=PLAN_DATE)
        assert not mirror.enabled
        assert not result.ok
        assert "not configured" in result.error

    def test_from_settings_without_token(self):
        mirror = NotionMirror.from_settings(SimpleNamespace(notion_configured=False))
        assert not mirror.enabled
