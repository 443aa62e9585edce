"""Pytest configuration for local package import resolution and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    # Ensure tests can import `card_listing` and `build_listings` without package installation.
    sys.path.insert(0, project_root_str)

INVENTORY_HEADER = (
    "Card Name\tPlayer Name\tSport\tCard Number\tFeatures\tIMAGE URL\t"
    "League\tTeam \tSeason\tCondition\tBrand\tCard Set"
)
RONALDO_LINE = (
    "Ronaldo FC\tC. Ronaldo\tSoccer\t10\tAuto /25\thttp://img\t"
    "La Liga\tReal\t2023-2024\tNM\tTopps\t2023 Topps Chrome"
)
MESSI_LINE = (
    "2024 Topps Finest Messi Aqua\tLionel Messi\tSoccer\t1\tAqua Refractor /99\t"
    "http://img/messi\tMLS\tInter Miami\t2024\tNM\tTopps\t2024 Topps Finest MLS"
)

TEMPLATE_HEADER = (
    "*Action(SiteID=US|Country=US|Currency=USD|Version=1193),CustomLabel,*Category,*Title,"
    "PicURL,*ConditionID,C:Player/Athlete,C:Team,C:League,C:Parallel/Variety,C:Card Number,"
    "C:Autographed,C:Year Manufactured,C:Season,C:Manufacturer,C:Set,C:Card Name,C:Sport,*Description"
)


@pytest.fixture
def inventory_text() -> str:
    """Two-card inventory export with CRLF line endings and a trailing blank line."""

    return "\r\n".join([INVENTORY_HEADER, RONALDO_LINE, MESSI_LINE, ""])


@pytest.fixture
def template_text() -> str:
    """Listing template with one instructions row above the header and no data rows."""

    return "\n".join(["#INFO,Version=1.0,Template=fx_category_template_EBAY_US", TEMPLATE_HEADER, ""])
