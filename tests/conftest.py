from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def inquiry_payload() -> Dict[str, object]:
    return {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@x.com",
        "phone": "555-0100",
        "serviceAddress": "1 Main St",
        "packageInterest": "washer-only",
        "preferredInstallDate": "Monday",
        "dryerHookupType": "not-sure",
        "sixMonthAgreement": True,
        "autopayAgreement": True,
    }
