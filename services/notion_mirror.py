"""
Notion Plan Mirror

Best-effort copy of a generated plan's summary into the trainer's Notion
database. The relational row is the source of truth; this mirror is not kept
in lockstep and nothing reconciles the two.

The summary is flat (title, type, date, duration, fitness level, exercise
list, equipment), not the nested plan. Database properties are filled
according to the schema the target database actually has:

- Name     (title)      always
- Content  (rich_text)  JSON summary, truncated to Notion's 2000 char limit
- Type     (select)     "Workout Plan"
- Date     (date)       plan start date
- User ID  (rich_text)  trainer id
"""

import json
import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, Optional

from notion_client import Client

logger = logging.getLogger(__name__)

NOTION_RICH_TEXT_LIMIT = 2000


@dataclass
class MirrorResult:
    """Outcome of a mirror write. Failures are reported here, never raised."""
    ok: bool
    page_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class MirrorSummary:
    title: str
    type: str
    date: str
    duration: str
    fitness_level: str
    exercises: str
    equipment: str

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)


def format_plan_date(value: date) -> str:
    """UK-style date used in plan titles and summaries."""
    return value.strftime("%d/%m/%Y")


def build_mirror_summary(
    content: Dict[str, Any],
    *,
    title: str,
    session_type: str,
    fitness_level: str,
    plan_date: date,
    default_minutes: int,
) -> MirrorSummary:
    session_details = content.get("sessionDetails") or {}
    name = session_details.get("name") or title
    when = format_plan_date(plan_date)

    duration = session_details.get("duration") or str(default_minutes)
    if str(duration).isdigit():
        duration = f"{duration} minutes"

    exercises = "; ".join(
        ", ".join(ex.get("exercise", "") for ex in circuit.get("exercises", []) if ex.get("exercise"))
        for circuit in content.get("mainWorkout", [])
    )

    return MirrorSummary(
        title=f"{name} - {when}",
        type="Group Class" if session_type == "group" else "Personal Training",
        date=when,
        duration=duration,
        fitness_level=fitness_level,
        exercises=exercises,
        equipment=", ".join(content.get("equipmentNeeded", [])),
    )


class NotionMirror:
    """Writes plan summaries into one Notion database."""

    def __init__(self, client: Optional[Client], database_id: Optional[str]):
        self.client = client
        self.database_id = database_id

    @classmethod
    def from_settings(cls, settings) -> "NotionMirror":
        if not settings.notion_configured:
            logger.info("Notion mirror disabled (NOTION_TOKEN / NOTION_DATABASE_ID not set)")
            return cls(client=None, database_id=None)
        return cls(client=Client(auth=settings.NOTION_TOKEN), database_id=settings.NOTION_DATABASE_ID)

    @property
    def enabled(self) -> bool:
        return self.client is not None and bool(self.database_id)

    def build_properties(
        self,
        database_schema: Dict[str, Any],
        summary: MirrorSummary,
        *,
        trainer_id: str,
        plan_date: date,
    ) -> Dict[str, Any]:
        db_props = database_schema.get("properties", {}) or {}

        def has(prop: str, prop_type: Optional[str] = None) -> bool:
            if prop not in db_props:
                return False
            return prop_type is None or db_props[prop].get("type") == prop_type

        properties: Dict[str, Any] = {
            "Name": {"title": [{"text": {"content": summary.title}}]},
        }
        if has("Content"):
            properties["Content"] = {
                "rich_text": [{"text": {"content": summary.to_json()[:NOTION_RICH_TEXT_LIMIT]}}]
            }
        if has("Type", "select"):
            properties["Type"] = {"select": {"name": "Workout Plan"}}
        if has("Date", "date"):
            properties["Date"] = {"date": {"start": plan_date.isoformat()}}
        if has("User ID", "rich_text"):
            properties["User ID"] = {"rich_text": [{"text": {"content": trainer_id}}]}
        return properties

    def mirror_plan(
        self,
        summary: MirrorSummary,
        *,
        trainer_id: str,
        plan_date: date,
    ) -> MirrorResult:
        """Create the Notion page. Any failure becomes a failed MirrorResult."""
        if not self.enabled:
            return MirrorResult(ok=False, error="Notion mirror not configured")

        try:
            database = self.client.databases.retrieve(database_id=self.database_id)
            properties = self.build_properties(
                database, summary, trainer_id=trainer_id, plan_date=plan_date,
            )
            page = self.client.pages.create(
                parent={"database_id": self.database_id},
                properties=properties,
            )
        except Exception as e:
            return MirrorResult(ok=False, error=f"{type(e).__name__}: {e}")

        return MirrorResult(ok=True, page_id=page.get("id"))
