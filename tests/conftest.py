"""
Shared fixtures.

- console/renderer/output: a Renderer writing plain text into a buffer
- settings: Settings for a fake Netbox instance
- cable, cables_page: Netbox-shaped response bodies
"""

import io
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from netbox_cli.config import Settings
from netbox_cli.endpoints import get_endpoint
from netbox_cli.netbox_client import NetBoxClient
from netbox_cli.renderer import Renderer

NETBOX_URL = "https://netbox.example.com"


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


@pytest.fixture
def renderer(console) -> Renderer:
    return Renderer(console)


@pytest.fixture
def output(console):
    """Text rendered so far."""
    return lambda: console.file.getvalue()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="development",
        netbox_url=NETBOX_URL,
        netbox_api_token="0123456789abcdef",
        page_size=2,
    )


@pytest.fixture
def mock_client():
    """NetBoxClient double with working URL helpers."""
    client = MagicMock(spec=NetBoxClient)
    client.base_url = NETBOX_URL
    client.url_for.side_effect = lambda p: p if p.startswith("http") else f"{NETBOX_URL}{p}"
    client.check_ssl.return_value = None
    return client


@pytest.fixture
def cables_endpoint():
    return get_endpoint("dcim", "cables")


@pytest.fixture
def cable() -> Dict[str, Any]:
    return {
        "id": 7,
        "url": f"{NETBOX_URL}/api/dcim/cables/7/",
        "display": "#7",
        "type": "cat6",
        "a_terminations": [
            {
                "object_type": "dcim.interface",
                "object_id": 101,
                "object": {"id": 101, "display": "Gi0/1", "device": {"id": 1, "name": "sw01"}},
            }
        ],
        "status": {"value": "connected", "label": "Connected"},
        "tenant": None,
        "label": "",
        "length": 0,
        "mark_connected": False,
        "tags": [],
        "last_updated": "2024-05-20T21:53:30Z",
    }


def make_page(results, next_url=None, count=None) -> Dict[str, Any]:
    return {
        "count": len(results) if count is None else count,
        "next": next_url,
        "previous": None,
        "results": results,
    }


@pytest.fixture
def cables_page(cable):
    return make_page([cable])
