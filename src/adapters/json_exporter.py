"""Exportación JSON de respuestas.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines (jq, diffs, fixtures).
- Permite guardar una respuesta tal cual la vio el cliente (status + data + errors).
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import ResponseEnvelope


def export_envelope_json(*, envelope: ResponseEnvelope, output_path: Path) -> Path:
    """Exporta un `ResponseEnvelope` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = envelope.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
