from fastapi import APIRouter, status

from pdv_api.dependencies.dbDependecies import db_dependency
from pdv_api.modules.scale.schemas import ScaleReadingIn, ScaleReadingOut, ScaleWeightOut
from pdv_api.modules.scale.service import WeightSensor

scale_router = APIRouter(prefix="/scale", tags=["Scale"])


@scale_router.post("/readings", response_model=ScaleReadingOut, status_code=status.HTTP_201_CREATED)
async def push_reading(reading_data: ScaleReadingIn, db: db_dependency):
    """Recibe una lectura del puente de la balanza"""
    return WeightSensor(db).record_reading(reading_data.weight_kg, reading_data.stable)


@scale_router.get("/weight", response_model=ScaleWeightOut)
async def get_weight(db: db_dependency):
    """
    Peso actual para agregar un producto pesable.

    - **weight_kg**: null si la última lectura es vieja (> SCALE_FRESHNESS_SECONDS),
      inestable o sin peso
    """
    weight = WeightSensor(db).read_weight()
    return ScaleWeightOut(weight_kg=weight, available=weight is not None)
