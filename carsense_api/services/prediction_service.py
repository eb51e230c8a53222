import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from carsense_api.models.user import User
from carsense_api.models.vehicle import Vehicle
from carsense_api.policy import Action, require_caller
from carsense_api.schemas.ml import (
    BasicPredictionResponse,
    MLModel,
    PredictionFeedback,
    SensorReading,
    VehicleHealthPredictionRequest,
    VehicleHealthPredictionResponse,
    VehicleInfo,
)
from carsense_api.services.diagnostic_service import diagnostic_service
from carsense_api.services.ml_client import MLServiceClient
from carsense_api.services.vehicle_service import vehicle_service
from carsense_api.utils.exceptions import NotFoundException

logger = logging.getLogger(__name__)


def build_health_request(db: Session, v: Vehicle, mileage: int | None = None) -> VehicleHealthPredictionRequest:
    """
    Assemble the ML request for a vehicle from its latest diagnostic.

    Readings of every snapshot in that diagnostic are sent; obdParameters keeps
    the last value seen for each PID. Without an explicit mileage the
    diagnostic's odometer is used.
    """
    latest = diagnostic_service.latest_for_vehicle(db, v.uuid)

    dtc_codes: list[str] = []
    readings: list[SensorReading] = []
    obd: dict[str, float] = {}

    if latest is not None:
        dtc_codes = sorted({i.code for i in latest.dtc_instances})
        for r in (r for s in latest.snapshots for r in s.readings):
            readings.append(SensorReading(pid=r.pid, value=r.value, unit=r.unit))
            obd[r.pid] = r.value
        if mileage is None:
            mileage = latest.odometer

    return VehicleHealthPredictionRequest(
        vehicle_id=v.id,
        vehicleInfo=VehicleInfo(
            make=v.make,
            model=v.model,
            year=v.year,
            vin=v.vin,
            engineType=v.engineType,
            fuelType=v.fuelType,
            transmissionType=v.transmissionType,
            mileage=mileage,
        ),
        dtcCodes=dtc_codes,
        obdParameters=obd,
        sensorReadings=readings or None,
        requestTime=datetime.now(timezone.utc),
    )


class PredictionService:

    def list_models(self, client: MLServiceClient, caller: User | None) -> list[MLModel]:
        require_caller(caller)
        return client.list_models()

    def predict_health(
        self, db: Session, client: MLServiceClient, vehicle_uuid: str,
        caller: User | None, mileage: int | None = None,
    ) -> VehicleHealthPredictionResponse:
        v = vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.VIEW)
        request = build_health_request(db, v, mileage)
        logger.info(
            "Requesting vehicle health prediction",
            extra={"vehicleUUID": v.uuid, "dtcCount": len(request.dtcCodes)},
        )
        result = client.predict_vehicle_health(request)
        logger.info(
            f"Health prediction received (score {result.predictions.vehicleHealthScore})",
            extra={"vehicleUUID": v.uuid, "requestId": result.requestId},
        )
        return result

    def list_predictions(
        self, db: Session, client: MLServiceClient, vehicle_uuid: str, caller: User | None,
    ) -> list[BasicPredictionResponse]:
        v = vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.VIEW)
        return client.get_vehicle_predictions(v.id)

    def submit_feedback(
        self, db: Session, client: MLServiceClient, vehicle_uuid: str, prediction_id: int,
        feedback: PredictionFeedback, caller: User | None,
    ) -> BasicPredictionResponse:
        """
        Forward feedback on a prediction made for a vehicle the caller may update.
        The ML service is called with a service token, so the prediction must be
        one of this vehicle's before anything is forwarded.
        """
        v = vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.UPDATE)
        if not any(p.id == prediction_id for p in client.get_vehicle_predictions(v.id)):
            logger.warning(
                f"Prediction {prediction_id} does not belong to vehicle {v.uuid}",
                extra={"predictionId": prediction_id, "vehicleUUID": v.uuid},
            )
            raise NotFoundException("Prediction")

        logger.info("Submitting prediction feedback", extra={"predictionId": prediction_id, "userId": caller.id})
        return client.submit_feedback(prediction_id, feedback)


prediction_service = PredictionService()
