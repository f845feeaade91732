import json
from pathlib import Path

import pytest

from agreements import AgreementData

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def load_fixture(name: str):
    with open(FIXTURES_DIR / name, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture()
def agreement_payload():
    return load_fixture("agreement.json")


@pytest.fixture()
def agreement_data(agreement_payload):
    return AgreementData.model_validate(agreement_payload)


@pytest.fixture(autouse=True)
def isolate_metrics(monkeypatch, tmp_path):
    """Keep metric rows out of the repo and away from any configured Supabase project."""
    monkeypatch.setenv("METRICS_DIR", str(tmp_path / "metrics"))
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    yield
