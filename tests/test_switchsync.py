"""Unit tests for the process entry point."""

from unittest.mock import AsyncMock, patch

import pytest

import switchsync


class TestMain:

    @pytest.mark.asyncio
    async def test_missing_config_exits_with_error(self, tmp_path, caplog):
        code = await switchsync.main(str(tmp_path / "missing.yaml"))

        assert code == 2
        assert "Configuration error" in caplog.text

    @pytest.mark.asyncio
    async def test_invalid_config_exits_with_error(self, tmp_path):
        path = tmp_path / "switchsync.yaml"
        path.write_text("groups: []")

        assert await switchsync.main(str(path)) == 2

    @pytest.mark.asyncio
    async def test_unreachable_broker(self, tmp_path):
        path = tmp_path / "switchsync.yaml"
        path.write_text("mqtt:\n  host: broker\n  port: 1883\n")

        with patch("switchsync.SwitchSync") as app_cls:
            app = app_cls.return_value
            app.start = AsyncMock(side_effect=ConnectionRefusedError("refused"))
            app.stop = AsyncMock()

            assert await switchsync.main(str(path)) == 1

        app.stop.assert_awaited_once()
