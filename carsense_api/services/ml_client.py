import logging
from typing import Any

import httpx
from pydantic import ValidationError

from carsense_api.config import Settings
from carsense_api.schemas.ml import (
    BasicPredictionResponse,
    MLModel,
    PredictionFeedback,
    VehicleHealthPredictionRequest,
    VehicleHealthPredictionResponse,
)
from carsense_api.utils.exceptions import MLServiceException
from carsense_api.utils.security import create_access_token

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_ID = "carsense-api"


class MLServiceClient:
    """
    Synchronous client for the CarSense ML service.

    The ML service trusts admin-role tokens signed with the shared secret, so
    every request carries a short-lived service token.
    """

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self._settings = settings
        self._client = httpx.Client(
            base_url=settings.ML_SERVICE_URL.rstrip("/") + "/api/v1",
            timeout=settings.ML_SERVICE_TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict:
        token = create_access_token(self._settings, SERVICE_ACCOUNT_ID, "admin", expires_minutes=5)
        return {"Authorization": f"Bearer {token}"}

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = self._client.request(method, path, json=json, headers=self._headers())
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"ML service returned {e.response.status_code} for {method} {path}")
            raise MLServiceException(f"ML service returned HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"ML service request {method} {path} failed: {e}")
            raise MLServiceException("ML service is unreachable")
        except ValueError:
            raise MLServiceException("ML service returned a non-JSON response")

    # ─── Models ───────────────────────────────────────────────────────────────
    def list_models(self) -> list[MLModel]:
        data = self._request("GET", "/models/")
        try:
            return [MLModel.model_validate(m) for m in data]
        except (ValidationError, TypeError):
            raise MLServiceException("ML service returned an unexpected model list")

    # ─── Predictions ──────────────────────────────────────────────────────────
    def predict_vehicle_health(self, request: VehicleHealthPredictionRequest) -> VehicleHealthPredictionResponse:
        data = self._request("POST", "/predictions/vehicle-health", json=request.model_dump(mode="json"))
        try:
            return VehicleHealthPredictionResponse.model_validate(data)
        except ValidationError:
            raise MLServiceException("ML service returned an unexpected prediction")

    def get_vehicle_predictions(self, vehicle_id: int) -> list[BasicPredictionResponse]:
        data = self._request("GET", f"/predictions/vehicle/{vehicle_id}")
        try:
            return [BasicPredictionResponse.model_validate(p) for p in data]
        except (ValidationError, TypeError):
            raise MLServiceException("ML service returned an unexpected prediction list")

    def submit_feedback(self, prediction_id: int, feedback: PredictionFeedback) -> BasicPredictionResponse:
        data = self._request(
            "POST", f"/predictions/{prediction_id}/feedback",
            json=feedback.model_dump(mode="json", exclude_none=True),
        )
        try:
            return BasicPredictionResponse.model_validate(data)
        except ValidationError:
            raise MLServiceException("ML service returned an unexpected feedback response")
