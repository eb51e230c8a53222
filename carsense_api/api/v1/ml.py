from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from carsense_api.database import get_db
from carsense_api.dependencies import get_optional_user, get_ml_client
from carsense_api.models.user import User
from carsense_api.schemas.common import error_responses
from carsense_api.schemas.ml import (
    BasicPredictionResponse, HealthPredictionOptions, MLModelsListResponse,
    PredictionFeedback, VehicleHealthPredictionResponse,
)
from carsense_api.services.ml_client import MLServiceClient
from carsense_api.services.prediction_service import prediction_service

router = APIRouter()


@router.get("/ml/models", response_model=MLModelsListResponse,
            summary="Models registered in the ML service",
            responses=error_responses(401, 502, 503))
def list_models(
    caller: User | None     = Depends(get_optional_user),
    client: MLServiceClient = Depends(get_ml_client),
):
    return {"models": prediction_service.list_models(client, caller)}


@router.post("/vehicles/{vehicle_uuid}/health-prediction",
             response_model=VehicleHealthPredictionResponse,
             summary="Predict vehicle health from the latest diagnostic",
             responses=error_responses(401, 404, 502, 503))
def predict_health(
    vehicle_uuid: str,
    body:         Optional[HealthPredictionOptions] = Body(None),
    db:           Session         = Depends(get_db),
    caller:       User | None     = Depends(get_optional_user),
    client:       MLServiceClient = Depends(get_ml_client),
):
    mileage = body.mileage if body else None
    return prediction_service.predict_health(db, client, vehicle_uuid, caller, mileage)


@router.get("/vehicles/{vehicle_uuid}/predictions",
            response_model=list[BasicPredictionResponse],
            summary="Prediction history kept by the ML service",
            responses=error_responses(401, 404, 502, 503))
def list_predictions(
    vehicle_uuid: str,
    db:           Session         = Depends(get_db),
    caller:       User | None     = Depends(get_optional_user),
    client:       MLServiceClient = Depends(get_ml_client),
):
    return prediction_service.list_predictions(db, client, vehicle_uuid, caller)


@router.post("/vehicles/{vehicle_uuid}/predictions/{prediction_id}/feedback",
             response_model=BasicPredictionResponse,
             summary="Send feedback on one of the vehicle's predictions",
             responses=error_responses(401, 404, 422, 502, 503))
def submit_feedback(
    vehicle_uuid:  str,
    prediction_id: int,
    body:          PredictionFeedback,
    db:            Session         = Depends(get_db),
    caller:        User | None     = Depends(get_optional_user),
    client:        MLServiceClient = Depends(get_ml_client),
):
    return prediction_service.submit_feedback(db, client, vehicle_uuid, prediction_id, body, caller)
