"""Tests for log entry JSON encoding."""

import json
from datetime import datetime
from decimal import Decimal

from api_key_core.enums import BackendKind
from api_key_core.schemas import ValidationResult
from api_key_core.utils.json_utils import dumps


class TestDumps:
    """Test encoding of values found in log extras."""

    def test_encodes_enums_and_timestamps(self):
        result = json.loads(
            dumps({"backend": BackendKind.MYSQL, "at": datetime(2024, 1, 1, 8, 30)})
        )
        assert result == {"backend": "mysql", "at": "2024-01-01T08:30:00"}

    def test_encodes_decimal(self):
        assert json.loads(dumps({"value": Decimal("1.5")})) == {"value": 1.5}

    def test_encodes_models(self):
        result = json.loads(dumps({"result": ValidationResult.invalid()}))
        assert result["result"] == {"is_valid": False, "owner": None, "key_type": 0}

    def test_falls_back_to_str(self):
        assert json.loads(dumps({"value": object})) == {"value": str(object)}
