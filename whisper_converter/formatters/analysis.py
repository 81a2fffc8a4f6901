"""Full analysis JSON formatter, validated against a bundled JSON schema.

WHY: Automation hosts (n8n flows, dashboards, review tools) consume the
complete normalized result (segments, statistics, time markers, and all
rendered exports) as one JSON document. A schema keeps that contract
explicit and catches accidental shape changes before a consumer does.

HOW: Serializes ProcessedTranscription.to_dict() and validates it with
jsonschema against analysis_schema.json (next to this module) before
returning.

RULES:
- Keys are camelCase, matching the host wire format
- Validate output against the schema before returning; raise on failure
- Output suffix: "-analysis.json"; media type: "application/json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from whisper_converter.core.ir import ProcessedTranscription
from whisper_converter.formatters.base import BaseFormatter, FormatterOutput

SCHEMA_PATH = Path(__file__).resolve().parent / "analysis_schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def get_schema() -> Dict[str, Any]:
    """Load and cache the analysis JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


class AnalysisFormatter(BaseFormatter):
    """Formatter producing the complete, schema-validated analysis document."""

    @property
    def name(self) -> str:
        return "Analysis JSON"

    def format(self, transcript: ProcessedTranscription) -> List[FormatterOutput]:
        """Serialize and validate the processed transcription.

        Raises:
            jsonschema.ValidationError: If the document does not conform
                to analysis_schema.json.
        """
        document = transcript.to_dict()
        jsonschema.validate(instance=document, schema=get_schema())
        return [
            FormatterOutput(
                suffix="-analysis.json",
                content=json.dumps(document, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
