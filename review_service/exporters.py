"""Serialization of review collections into CSV, XML and JSON exports."""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence
from xml.sax.saxutils import escape

from review_service.models import isoformat, utcnow

logger = logging.getLogger(__name__)

EXPORT_FIELDS = (
    "id",
    "customerId",
    "customerName",
    "rating",
    "title",
    "comment",
    "status",
    "createdAt",
    "updatedAt",
)

CONTENT_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "xml": "application/xml",
    "json": "application/json",
}

# Checked in this order; the first format any candidate names wins.
MEDIA_PRIORITY = (
    ("csv", {"text/csv", "csv"}),
    ("xml", {"application/xml", "text/xml", "xml"}),
    ("json", {"application/json", "json"}),
)

EXPORT_SOURCE = "customer_reviews"

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass(frozen=True)
class ExportPayload:
    body: str
    content_type: str
    media_type: str


def parse_accept(accept: Optional[str]) -> List[str]:
    """Split an Accept header into bare, lower-cased media types.

    ``;q=`` weights and other parameters are dropped.
    """
    if not accept:
        return []
    candidates = []
    for part in accept.split(","):
        media = part.split(";", 1)[0].strip().lower()
        if media:
            candidates.append(media)
    return candidates


def negotiate_media_type(accept: Optional[str]) -> str:
    """Pick ``csv``, ``xml`` or ``json`` for an Accept header.

    Client quality weights are ignored: a fixed CSV > XML > JSON priority
    decides, and JSON is the fallback.
    """
    candidates = set(parse_accept(accept))
    for media_type, aliases in MEDIA_PRIORITY:
        if candidates & aliases:
            return media_type
    return "json"


def _records(reviews: Iterable[Any]) -> List[Dict[str, Any]]:
    return [review if isinstance(review, dict) else review.to_dict() for review in reviews]


def to_csv(reviews: Iterable[Any]) -> str:
    """CSV with an unquoted header row and quoted string fields.

    Embedded quotes are doubled, so any standard CSV reader recovers the
    original values. An empty collection still yields the header row.
    """
    buffer = io.StringIO()
    buffer.write(",".join(EXPORT_FIELDS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for record in _records(reviews):
        writer.writerow(["" if record[name] is None else record[name] for name in EXPORT_FIELDS])
    return buffer.getvalue()


def xml_escape(value: Any) -> str:
    return escape(str(value), _XML_ENTITIES)


def to_xml(reviews: Iterable[Any]) -> str:
    lines = ['<?xml version="1.0" encoding="UTF-8"?>']
    records = _records(reviews)
    if not records:
        lines.append("<reviews></reviews>")
        return "\n".join(lines)

    lines.append("<reviews>")
    for record in records:
        lines.append("  <review>")
        for name in EXPORT_FIELDS:
            value = record.get(name)
            lines.append(f"    <{name}>{xml_escape('' if value is None else value)}</{name}>")
        lines.append("  </review>")
    lines.append("</reviews>")
    return "\n".join(lines)


def json_export_document(
    reviews: Sequence[Any], now: Optional[datetime] = None
) -> Dict[str, Any]:
    records = _records(reviews)
    return {
        "metadata": {
            "exportDate": isoformat(now or utcnow()),
            "totalRecords": len(records),
            "format": "json",
            "source": EXPORT_SOURCE,
        },
        "data": records,
    }


def to_json_export(reviews: Sequence[Any], now: Optional[datetime] = None) -> str:
    return json.dumps(json_export_document(reviews, now), ensure_ascii=False)


def format_export(reviews: Sequence[Any], media_type: str) -> ExportPayload:
    """Serialize the whole collection in one of the supported formats."""
    if media_type == "csv":
        body = to_csv(reviews)
    elif media_type == "xml":
        body = to_xml(reviews)
    elif media_type == "json":
        body = to_json_export(reviews)
    else:
        raise ValueError(f"Unsupported export format: {media_type!r}")

    logger.info("Exported %d reviews as %s", len(reviews), media_type)
    return ExportPayload(body=body, content_type=CONTENT_TYPES[media_type], media_type=media_type)
