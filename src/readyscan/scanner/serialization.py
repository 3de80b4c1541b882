"""
JSON rendering of scan results.

Field names are emitted in camelCase. Opaque collaborator payloads (``llm``,
``hallucinationReport``, ``mirrorReport``) pass through untouched.
"""

from __future__ import annotations

import dataclasses
import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping

from readyscan.protocols import Finding, FindingLocation

from .models import ScanResult


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_jsonable(value: Any) -> Any:
    """Recursively convert dataclasses, enums and datetimes to JSON types."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            camel_case(f.name): to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {_key(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def _key(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    return camel_case(str(key))


def finding_to_dict(finding: Finding) -> Dict[str, Any]:
    data = to_jsonable(finding)
    if finding.location is None:
        data.pop("location")
    else:
        data["location"] = {k: v for k, v in data["location"].items() if v is not None}
    return data


def finding_from_dict(data: Mapping[str, Any]) -> Finding:
    """Inverse of :func:`finding_to_dict`."""
    location = data.get("location")
    timestamp = data.get("timestamp")
    kwargs: Dict[str, Any] = {}
    if timestamp is not None:
        kwargs["timestamp"] = datetime.fromisoformat(timestamp) if isinstance(timestamp, str) else timestamp
    return Finding(
        id=data["id"],
        title=data["title"],
        category=data["category"],
        severity=data["severity"],
        description=data.get("description", ""),
        remediation=data.get("remediation", ""),
        impact_score=data["impactScore"],
        confidence=data.get("confidence", 1.0),
        location=(
            FindingLocation(
                url=location.get("url"),
                selector=location.get("selector"),
                text_snippet=location.get("textSnippet"),
                line=location.get("line"),
            )
            if location
            else None
        ),
        evidence=tuple(data.get("evidence", ())),
        tags=tuple(data.get("tags", ())),
        **kwargs,
    )


def _payload(value: Mapping[str, Any] | None) -> Dict[str, Any] | None:
    return dict(value) if value is not None else None


def scan_result_to_dict(result: ScanResult, *, include_nodes: bool = False) -> Dict[str, Any]:
    extractability = None
    if result.extractability is not None:
        extractability = to_jsonable(result.extractability)
        if not include_nodes:
            extractability.pop("nodes")

    return {
        "scanId": result.scan_id,
        "url": result.url,
        "timestamp": result.timestamp.isoformat(),
        "issues": [finding_to_dict(f) for f in result.issues],
        "scores": {category.value: score for category, score in result.scores.items()},
        "scoring": to_jsonable(result.scoring),
        "chunking": to_jsonable(result.chunking),
        "extractability": extractability,
        "llm": _payload(result.llm),
        "hallucinationReport": _payload(result.hallucination_report),
        "mirrorReport": _payload(result.mirror_report),
        "sections": {name: state.value for name, state in result.sections.items()},
        "durationSeconds": round(result.duration_seconds, 4),
    }


def to_json(result: ScanResult, *, indent: int | None = 2, include_nodes: bool = False) -> str:
    return json.dumps(scan_result_to_dict(result, include_nodes=include_nodes), indent=indent, default=str)
