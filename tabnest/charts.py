from __future__ import annotations

from typing import Any, Dict

import altair as alt

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def encode_payload(payload: Any) -> Any:
    """Make an item payload JSON-friendly; Altair charts become Vega-Lite specs."""
    if isinstance(payload, alt.TopLevelMixin):
        return {"type": "vega-lite", "spec": to_vega_spec(payload)}
    if isinstance(payload, dict):
        return {key: encode_payload(value) for key, value in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [encode_payload(value) for value in payload]
    return payload
