"""
Tests for running the application module directly.
"""

import runpy
from unittest.mock import patch

from config.settings import get_settings


def test_main_binds_host_and_port_from_settings():
    settings = get_settings()

    with patch("uvicorn.run") as run:
        runpy.run_module("api.app", run_name="__main__")

    run.assert_called_once()
    assert run.call_args.kwargs == {"host": settings.host, "port": settings.port}
