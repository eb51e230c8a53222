"""
Request/response shapes of the external CarSense ML service.

These mirror the service's own pydantic schemas; the API only sends and
receives them, it never computes predictions itself.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

Severity = Literal["low", "medium", "high", "critical"]
Urgency = Literal["routine", "soon", "urgent", "immediate"]


# ═══════════════════════════════════════════════════════════════════════════════
# ML MODELS
# ═══════════════════════════════════════════════════════════════════════════════
class MLModel(BaseModel):
    """Model details as registered in the ML service."""
    id: int = Field(..., description="Model ID")
    name: str = Field(..., description="Model name")
    version: str = Field(..., description="Model version")
    description: Optional[str] = Field(None, description="Model description")
    framework: str = Field(..., description="ML framework used (e.g., 'tensorflow', 'pytorch', 'sklearn')")
    vehicle_make: Optional[str] = Field(None, description="Vehicle make if model is make-specific")
    model_type: str = Field(..., description="Model type (e.g., 'classification', 'regression')")
    trained_at: datetime = Field(..., description="Training timestamp")
    metrics: Dict[str, float] = Field(default_factory=dict, description="Model performance metrics")
    input_features: List[str] = Field(default_factory=list, description="List of features the model expects")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {"protected_namespaces": ()}


class MLModelsListResponse(BaseModel):
    models: List[MLModel]


# ═══════════════════════════════════════════════════════════════════════════════
# BASIC PREDICTIONS
# ═══════════════════════════════════════════════════════════════════════════════
class BasicPredictionResponse(BaseModel):
    id: int
    model_id: int
    vehicle_id: int
    prediction_date: datetime
    input_data: Dict[str, Any]
    results: Dict[str, Any]
    confidence: float
    feedback: Optional[Dict[str, Any]] = None

    model_config = {"protected_namespaces": ()}


# ═══════════════════════════════════════════════════════════════════════════════
# VEHICLE HEALTH PREDICTIONS
# ═══════════════════════════════════════════════════════════════════════════════
class VehicleInfo(BaseModel):
    make: str = Field(..., description="Vehicle manufacturer (e.g., 'Dacia', 'Volkswagen')")
    model: str = Field(..., description="Vehicle model (e.g., 'Logan', 'Golf')")
    year: int = Field(..., description="Manufacturing year")
    vin: Optional[str] = Field(None, description="Vehicle Identification Number")
    engineType: str = Field(..., description="Engine type (e.g., 'diesel', 'gasoline')")
    fuelType: str = Field(..., description="Fuel type")
    transmissionType: Optional[str] = Field(None, description="Transmission type")
    mileage: Optional[int] = Field(None, description="Current vehicle mileage in kilometers")


class SensorReading(BaseModel):
    pid: str = Field(..., description="Parameter ID (e.g., 'rpm', 'coolant_temp')")
    value: float = Field(..., description="Sensor value")
    unit: str = Field(..., description="Unit of measurement (e.g., 'RPM', '°C')")


class VehicleHealthPredictionRequest(BaseModel):
    vehicle_id: int = Field(..., description="The unique ID of the vehicle in the backend database.")
    vehicleInfo: VehicleInfo
    dtcCodes: List[str] = Field(default_factory=list, description="List of DTC codes present in the vehicle")
    obdParameters: Dict[str, float] = Field(default_factory=dict, description="OBD parameters as key-value pairs")
    sensorReadings: Optional[List[SensorReading]] = Field(None, description="Detailed sensor readings with units")
    requestTime: datetime = Field(..., description="Request timestamp")


class EstimatedCost(BaseModel):
    min: float
    max: float
    currency: str


class ComponentFailure(BaseModel):
    component: str = Field(..., description="Vehicle component name")
    failureProbability: float = Field(..., description="Probability of failure (0.0 to 1.0)")
    timeToFailure: Optional[int] = Field(None, description="Estimated time to failure in days")
    confidence: float = Field(..., description="Confidence in the prediction (0.0 to 1.0)")
    severity: Severity


class MaintenanceRecommendation(BaseModel):
    action: str = Field(..., description="Recommended action")
    urgency: Urgency
    component: str = Field(..., description="Target component")
    estimatedCost: Optional[EstimatedCost] = None
    description: str = Field(..., description="Detailed description of the recommendation")


class PredictionResult(BaseModel):
    vehicleHealthScore: float = Field(..., description="Overall vehicle health score (0-100)")
    componentFailures: List[ComponentFailure]
    maintenanceRecommendations: List[MaintenanceRecommendation]
    overallUrgency: Severity


class VehicleHealthPredictionResponse(BaseModel):
    requestId: str = Field(..., description="Unique request identifier")
    predictions: PredictionResult
    modelInfo: Dict[str, Union[str, float]] = Field(..., description="Information about the model used")
    processedAt: datetime = Field(..., description="Processing timestamp")


# ═══════════════════════════════════════════════════════════════════════════════
# FEEDBACK
# ═══════════════════════════════════════════════════════════════════════════════
class PredictionFeedback(BaseModel):
    accuracy: Optional[float] = Field(None, ge=0, le=100)
    comments: Optional[str] = None
    isActionable: Optional[bool] = None
    additionalData: Optional[Dict[str, Any]] = None


class HealthPredictionOptions(BaseModel):
    """Optional body for POST /vehicles/{uuid}/health-prediction."""
    mileage: Optional[int] = Field(None, ge=0, description="Current mileage in kilometers")
