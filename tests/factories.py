from datetime import datetime
from zoneinfo import ZoneInfo

from fep.enrichment.llm.base import LlmCompletion
from fep.models import CanonicalEvent, EventRecord


PRAGUE = ZoneInfo("Europe/Prague")


def at(year: int, month: int, day: int, hour: int = 10, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=PRAGUE)


def make_record(**overrides) -> EventRecord:
    payload = {
        "source": "visitostrava",
        "source_url": "https://www.visitostrava.eu/cz/akce/rodina/1001-loutkove-divadlo.html",
        "source_event_id": "1001",
        "title": "Puppet Show for Kids in Ostrava",
        "start_at": at(2026, 3, 7),
        "venue": "Divadlo loutek Ostrava",
        "location_name": "Divadlo loutek Ostrava",
        "description_raw": "Pohádka pro děti 3-8 let.",
        "fingerprint": "",
    }
    payload.update(overrides)
    return EventRecord.model_validate(payload)


def make_event(event_id: int, **overrides) -> CanonicalEvent:
    payload = {
        "id": event_id,
        "source": "allevents",
        "source_url": f"https://allevents.in/ostrava/event-{event_id}",
        "source_event_id": str(event_id),
        "title": f"Event {event_id}",
        "start_at": at(2026, 3, 7),
        "fingerprint": f"fp-{event_id}",
        "created_at": at(2026, 3, 1),
    }
    payload.update(overrides)
    return CanonicalEvent.model_validate(payload)


class FakeLlmClient:
    """Returns canned completions in order, or raises a canned error."""

    def __init__(self, *responses, error: Exception | None = None) -> None:
        self.responses = list(responses)
        self.error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> LlmCompletion:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return LlmCompletion(text=self.responses.pop(0), prompt_tokens=120, completion_tokens=40)
