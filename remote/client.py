"""
remote/client.py — Remote biomarker computation
=================================================
Optional accelerator: a session can post its recent signal to a biomarker
service (see `api/`) and adopt the snapshot it returns.  The service is
never trusted blindly.  Transport errors, timeouts, non-2xx statuses,
non-JSON bodies and bodies that do not match `BiomarkerPayload` all surface
as `RemoteComputationError`, which `PPGProcessor.get_biomarkers` turns into
a fallback to local derivation.

    client = RemoteBiomarkerClient("http://127.0.0.1:8000/api/biomarkers")
    snapshot = processor.get_biomarkers(remote=client)
"""

import httpx
from pydantic import ValidationError

from api.schemas import BiomarkerPayload
from config import REMOTE_ENDPOINT, REMOTE_MIN_SAMPLES, REMOTE_TIMEOUT_SECONDS
from model.biomarkers import BiomarkerSnapshot
from utils.logger import get_logger

logger = get_logger("remote.client")


class RemoteComputationError(Exception):
    """The remote service could not produce a usable snapshot."""


class RemoteBiomarkerClient:
    """
    Parameters
    ----------
    endpoint : str                 URL of ``POST /api/biomarkers``.
    timeout  : float               Per-request timeout (seconds).
    client   : httpx.Client | None Injected client (tests, connection pooling).
    """

    def __init__(
        self,
        endpoint: str = REMOTE_ENDPOINT,
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ):
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def compute(self, signal: list[float], sampling_rate: float) -> BiomarkerSnapshot:
        if len(signal) < REMOTE_MIN_SAMPLES:
            raise RemoteComputationError(
                f"Need at least {REMOTE_MIN_SAMPLES} samples, got {len(signal)}."
            )

        try:
            response = self._client.post(
                self.endpoint,
                json={"signal": list(signal), "samplingRate": sampling_rate},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise RemoteComputationError(f"Request to {self.endpoint} failed: {e}") from e
        except ValueError as e:
            raise RemoteComputationError(f"Response is not JSON: {e}") from e

        # Accept both the wrapped {"success", "data", ...} envelope and a bare payload
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]

        try:
            payload = BiomarkerPayload.model_validate(body)
        except ValidationError as e:
            raise RemoteComputationError(f"Malformed biomarker response: {e.error_count()} invalid field(s)") from e

        logger.debug("Remote snapshot adopted: HR=%.1f BPM", payload.heart_rate)
        return payload.to_snapshot()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RemoteBiomarkerClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
