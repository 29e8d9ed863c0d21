"""Turns engine replies into LINE message objects."""
from typing import Any, Dict, Iterable, List, Union

from api.features.events.models import EventModel

Reply = Union[str, EventModel]


class NotificationRenderer:
    """Text replies become text messages; a committed event becomes a ticket."""

    def __init__(self, ticket_alt_text: str = "Event ticket"):
        self.ticket_alt_text = ticket_alt_text

    def render(self, replies: Iterable[Reply]) -> List[Dict[str, Any]]:
        return [
            self.ticket(r) if isinstance(r, EventModel) else self.text(r)
            for r in replies
        ]

    @staticmethod
    def text(message: str) -> Dict[str, Any]:
        return {"type": "text", "text": message}

    def ticket(self, event: EventModel) -> Dict[str, Any]:
        rows = [
            ("Date", event.date),
            ("Deadline", event.deadline),
            ("Location", event.location),
            ("Capacity", str(event.members_max)),
            ("Lottery", "yes" if event.lottery else "no"),
            ("Details", event.description or "-"),
        ]
        return {
            "type": "flex",
            "altText": self.ticket_alt_text,
            "contents": {
                "type": "bubble",
                "body": {
                    "type": "box",
                    "layout": "vertical",
                    "spacing": "md",
                    "contents": [
                        {
                            "type": "text",
                            "text": event.event_name,
                            "wrap": True,
                            "weight": "bold",
                            "size": "xl",
                        },
                        {
                            "type": "box",
                            "layout": "vertical",
                            "margin": "lg",
                            "spacing": "sm",
                            "contents": [self._row(label, value) for label, value in rows],
                        },
                    ],
                },
            },
        }

    @staticmethod
    def _row(label: str, value: str) -> Dict[str, Any]:
        return {
            "type": "box",
            "layout": "baseline",
            "spacing": "sm",
            "contents": [
                {"type": "text", "text": label, "color": "#aaaaaa", "size": "sm", "flex": 1},
                {
                    "type": "text",
                    "text": value or "-",
                    "wrap": True,
                    "color": "#666666",
                    "size": "sm",
                    "flex": 3,
                },
            ],
        }
