import json, os, jsonschema

GOLDEN = os.path.join(os.path.dirname(__file__), "golden")


def test_health(client, monkeypatch):
    from telemetry_gateway import db
    monkeypatch.setattr(db, "ping", lambda: True)
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_ingest_golden(client, auth, store):
    payload = json.load(open(os.path.join(GOLDEN, "request.json"), "r"))
    r = client.post("/api/v1/telemetry", json=payload, headers=auth)
    assert r.status_code == 200
    body = r.json()
    schema = json.load(open(os.path.join(GOLDEN, "response.schema.json"), "r"))
    jsonschema.validate(body, schema)
    assert body["validSignals"] == 4
    assert {r.signal_name: r.reason for r in store.rejected} == {
        "Signal_3": "type_mismatch",
        "Signal_72": "out_of_range",
        "Signal_73": "type_mismatch",
        "Signal_999": "type_mismatch",
    }
