"""Tests for shared service helpers."""

import re
from datetime import datetime

from palletcount.services._helpers import new_id, now_iso, today_iso


class TestHelpers:
    def test_today_iso_format(self) -> None:
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", today_iso())

    def test_now_iso_is_parseable_utc(self) -> None:
        parsed = datetime.fromisoformat(now_iso())
        assert parsed.utcoffset() is not None
        assert parsed.utcoffset().total_seconds() == 0

    def test_new_id(self) -> None:
        assert re.fullmatch(r"[0-9a-f]{32}", new_id())
        assert new_id() != new_id()
