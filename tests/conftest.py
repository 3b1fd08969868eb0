"""Shared fixtures: temp config, sample workspace tree and an ASGI client."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio

from mission_control.common.config import load_config


def ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


OVERVIEW_YAML = """\
projects:
  - id: factursimple
    name: FacturSimple
    status: active
    progress: 75
  - id: reelfolio
    name: ReelFolio
    status: paused
    progress: 40
research:
  - id: b2b-leads
    title: B2B Lead Research
    score: 7.5
    status: parked
  - id: doc-collection
    title: Document Collection for Accountants
    score: 9.5
    status: consider
quickLinks:
  - {label: Workspace, url: /tmp, icon: folder}
"""


def build_workspace(root: Path) -> Path:
    """Create a small workspace tree used by the search tests."""
    files = {
        "top.md": "Invoice reminders live at the top level.",
        "factursimple/notes.md": "# Plan\nInvoice generator MVP\nthen deploy",
        "factursimple/memory/standup.md": "Discussed invoice numbering.",
        "memory/2026-02-04.md": "Talked about invoice pricing with Rob.",
        "research/invoice-ideas.txt": "Nothing relevant in the body.",
        "research/other.md": "Unrelated market notes.",
        "factursimple/logo.svg": "<svg>invoice</svg>",
        "node_modules/pkg/README.md": "invoice",
        "build/out.md": "invoice",
        ".git/HEAD.md": "invoice",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    return build_workspace(tmp_path / "workspace")


@pytest.fixture()
def config_file(tmp_path: Path, workspace: Path) -> Path:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    overview = config_dir / "overview.yaml"
    overview.write_text(OVERVIEW_YAML, encoding="utf-8")

    config_path = config_dir / "config.yaml"
    config_path.write_text(
        f"""
data_dir: {tmp_path}/data
workspace_dir: {workspace}
overview_file: {overview}
log_dir: {tmp_path}/logs
activities:
  max_entries: 10000
dashboard:
  poll_interval_seconds: 30
""",
        encoding="utf-8",
    )
    return config_path


@pytest.fixture()
def cfg(config_file: Path) -> dict:
    return load_config(config_file)


@pytest_asyncio.fixture()
async def client(config_file: Path):
    """Async httpx client bound to the FastAPI app with a temp config."""
    with patch("mission_control.dashboard.routes.CONFIG_PATH", config_file):
        from mission_control.dashboard.app import app
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
