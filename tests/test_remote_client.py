import json

import httpx
import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from remote.client import RemoteBiomarkerClient, RemoteComputationError

from conftest import feed

ENDPOINT = "http://rppg.test/api/biomarkers"

PAYLOAD = {
    "heartRate": 71.5,
    "breathingRate": 15.0,
    "hrv": 42.0,
    "sysBP": 93.5,
    "diaBP": 61.7,
    "parasympatheticHealth": 70.0,
    "wellnessValue": 75.0,
    "stressIndex": 28.0,
    "signalQuality": 12.0,
    "timestamp": 1700000000.0,
}


def make_client(handler):
    return RemoteBiomarkerClient(ENDPOINT, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_posts_signal_and_reads_envelope():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "data": PAYLOAD, "metadata": {}})

    snapshot = make_client(handler).compute([0.1] * 10, 30.0)

    assert seen["body"] == {"signal": [0.1] * 10, "samplingRate": 30.0}
    assert snapshot.heart_rate == 71.5
    assert snapshot.systolic_bp == 93.5
    assert snapshot.signal_quality == 12.0


def test_bare_payload_without_quality():
    payload = {k: v for k, v in PAYLOAD.items() if k != "signalQuality"}
    snapshot = make_client(lambda request: httpx.Response(200, json=payload)).compute([0.1] * 10, 30.0)
    assert snapshot.signal_quality == 0.0


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "Failed to calculate biomarkers"}),
    httpx.Response(200, text="<html>gateway</html>"),
    httpx.Response(200, json={"data": {"heartRate": "fast"}}),
    httpx.Response(200, json={**PAYLOAD, "hrv": 400}),
])
def test_unusable_responses_raise(response):
    with pytest.raises(RemoteComputationError):
        make_client(lambda request: response).compute([0.1] * 10, 30.0)


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(RemoteComputationError):
        make_client(handler).compute([0.1] * 10, 30.0)


def test_short_signal_is_not_sent():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=PAYLOAD)

    with pytest.raises(RemoteComputationError):
        make_client(handler).compute([0.1] * 4, 30.0)
    assert calls == []


def test_session_against_local_service(processor):
    feed(processor, 300, breath_amplitude=0.0)
    with RemoteBiomarkerClient("/api/biomarkers", client=TestClient(create_app())) as remote:
        snapshot = processor.get_biomarkers(remote=remote)
    assert snapshot.heart_rate == pytest.approx(72.0, abs=5.0)
