import json

from cli import draft


def test_offline_plain_draft_prints_agreement(agreement_payload, tmp_path, capsys):
    source = tmp_path / "agreement.json"
    source.write_text(json.dumps(agreement_payload), encoding="utf-8")
    pdf_path = tmp_path / "out" / "agreement.pdf"

    exit_code = draft.main([str(source), "--offline", "--format", "plain", "--pdf", str(pdf_path)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "RENT AGREEMENT" in out
    assert "1. TERM OF TENANCY" in out
    assert pdf_path.read_bytes().startswith(b"%PDF")


def test_online_draft_uses_generator(agreement_payload, tmp_path, capsys, monkeypatch):
    source = tmp_path / "agreement.json"
    source.write_text(json.dumps(agreement_payload), encoding="utf-8")
    monkeypatch.setattr(draft, "generate_rental_agreement", lambda data, mode: f"LIVE {mode.value} {data.landlord_name}")

    exit_code = draft.main([str(source), "--format", "rich"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "LIVE rich Ramesh Kumar"


def test_missing_or_invalid_input_exits_with_error(tmp_path, capsys):
    assert draft.main([str(tmp_path / "missing.json"), "--offline"]) == 2

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"landlord_name": "Only"}), encoding="utf-8")
    assert draft.main([str(bad), "--offline"]) == 2
    assert "Could not read agreement details" in capsys.readouterr().err
