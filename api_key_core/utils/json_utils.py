"""JSON encoding for structured log entries."""

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class LogEntryEncoder(json.JSONEncoder):
    """Encoder for the values found in log extras (enums, timestamps, models)."""

    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return float(obj)
        if hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        return str(obj)


def dumps(obj: Any, **kwargs) -> str:
    return json.dumps(obj, cls=LogEntryEncoder, **kwargs)
