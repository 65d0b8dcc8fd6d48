"""
FastAPI Backend for the CoolDecide web app.

Provides REST API endpoints for:
- Cooling method comparison and immersion detail
- Heat flux sweeps for temperature and power charts
- Air heat sink and reference boiling curve analysis
- Boiling dataset management and backups

Run with: uvicorn main:app --reload --port 8000
"""

from datetime import datetime
from typing import Dict, List, Optional, Any
import logging

from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from cooldecide import (
    CHIP_PRESETS,
    FLUIDS,
    REFERENCE_SURFACES,
    SURFACES,
    BoilingDataPoint,
    ChipSpec,
    CoolingMethod,
    HeatSinkConfig,
    ImmersionParams,
    __version__,
    compute_immersion,
    compute_method,
    compute_selected,
    curve_to_records,
    energy_savings_percent,
    evaluate_heatsink,
    evaluate_operating_point,
    generate_power_curve,
    generate_temperature_curve,
    new_dataset,
    parse_csv,
    validate_points,
    velocity_sweep,
)
from cooldecide.boiling_data import (
    DataSource,
    ExperimentMeta,
    LiteratureMeta,
    merge_for_chart,
    parse_meta,
)
from cooldecide.config import configure_logging, get_settings
from cooldecide.storage import (
    BackupManager,
    DatasetNotFoundError,
    DatasetRepository,
    StorageError,
    create_repository,
)

logger = logging.getLogger(__name__)


# ============================================================================
# FastAPI App Configuration
# ============================================================================

settings = get_settings()
configure_logging(settings)

app = FastAPI(
    title="CoolDecide API",
    description="Chip cooling comparison: natural, forced-air and immersion cooling",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageError)
async def storage_error_handler(request, exc: StorageError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


_repository: Optional[DatasetRepository] = None
_backups: Optional[BackupManager] = None


def get_repository() -> DatasetRepository:
    global _repository
    if _repository is None:
        _repository = create_repository(settings)
        logger.info("Using %s dataset storage", settings.storage_backend)
    return _repository


def get_backup_manager(repository: DatasetRepository = Depends(get_repository)) -> BackupManager:
    global _backups
    if _backups is None or _backups.repository is not repository:
        path = settings.backups_path if settings.storage_backend == "file" else None
        _backups = BackupManager(repository, path=path)
    return _backups


# ============================================================================
# Pydantic Models
# ============================================================================

class ChipConfig(BaseModel):
    """Chip thermal load."""

    tdp_watts: float = Field(default=700.0, gt=0, le=5000, description="Thermal design power")
    chip_area_mm2: float = Field(default=814.0, gt=0, le=5000, description="Die area in mm²")
    ambient_temp_C: float = Field(default=25.0, ge=-40, le=80, description="Ambient temperature")

    def to_spec(self) -> ChipSpec:
        return ChipSpec(self.tdp_watts, self.chip_area_mm2, self.ambient_temp_C)


class ImmersionConfig(BaseModel):
    """Immersion bath configuration."""

    fluid_key: str = Field(default="novec-7100")
    surface_key: str = Field(default="plain")
    fluid_temp_C: float = Field(default=50.0, description="Bulk fluid temperature")
    angle_deg: float = Field(default=0.0, ge=0, le=180, description="Surface inclination")
    flow_velocity_m_s: float = Field(default=0.0, ge=0, le=5, description="Forced flow velocity")

    def to_params(self) -> ImmersionParams:
        return ImmersionParams(
            fluid_key=self.fluid_key,
            surface_key=self.surface_key,
            fluid_temp_C=self.fluid_temp_C,
            angle_deg=self.angle_deg,
            flow_velocity_m_s=self.flow_velocity_m_s,
        )


class CalculateRequest(BaseModel):
    chip: ChipConfig = Field(default_factory=ChipConfig)
    methods: List[CoolingMethod] = Field(
        default_factory=lambda: list(CoolingMethod), min_length=1
    )


class ImmersionRequest(BaseModel):
    chip: ChipConfig = Field(default_factory=ChipConfig)
    immersion: ImmersionConfig = Field(default_factory=ImmersionConfig)


class TemperatureCurveRequest(BaseModel):
    chip_area_mm2: float = Field(default=814.0, gt=0)
    max_tdp: float = Field(default=700.0, gt=0)
    ambient_temp_C: float = Field(default=25.0)
    methods: List[CoolingMethod] = Field(default_factory=lambda: list(CoolingMethod))
    immersion: Optional[ImmersionConfig] = None
    steps: Optional[int] = Field(default=None, ge=1, le=1000)


class PowerCurveRequest(BaseModel):
    chip_area_mm2: float = Field(default=814.0, gt=0)
    max_tdp: float = Field(default=700.0, gt=0)
    methods: List[CoolingMethod] = Field(default_factory=lambda: list(CoolingMethod))
    flow_velocity_m_s: float = Field(default=0.0, ge=0)
    steps: Optional[int] = Field(default=None, ge=1, le=1000)


class SavingsRequest(BaseModel):
    chip: ChipConfig = Field(default_factory=ChipConfig)
    baseline: CoolingMethod = CoolingMethod.FORCED
    improved: CoolingMethod = CoolingMethod.IMMERSION
    immersion: ImmersionConfig = Field(default_factory=ImmersionConfig)


class HeatSinkRequest(BaseModel):
    chip: ChipConfig = Field(default_factory=ChipConfig)
    air_velocity_m_s: float = Field(default=3.0, gt=0, le=20)
    fan_rpm: float = Field(default=1500.0, ge=0, le=10000)
    fan_diameter_mm: float = Field(default=120.0, gt=0, le=300)
    heatsink_area_cm2: float = Field(default=200.0, gt=0)
    fin_density_fpi: float = Field(default=12.0, ge=0, le=40)
    include_sweep: bool = True


class ReferenceCurveRequest(BaseModel):
    chip: ChipConfig = Field(default_factory=ChipConfig)
    surface_key: str = "finned"
    t_sat_C: float = 61.0
    subcooling_K: float = Field(default=0.0, ge=0, le=50)
    orientation_deg: float = Field(default=0.0, ge=0, le=180)


class DataPointModel(BaseModel):
    t_surf: float
    q_flux: float


class DatasetCreate(BaseModel):
    name: str = Field(..., min_length=1)
    source: DataSource
    data: List[DataPointModel]
    experiment: Optional[Dict[str, Optional[str]]] = None
    literature: Optional[Dict[str, Optional[str]]] = None


class DatasetUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    source: Optional[DataSource] = None
    data: Optional[List[DataPointModel]] = None
    experiment: Optional[Dict[str, Optional[str]]] = None
    literature: Optional[Dict[str, Optional[str]]] = None


class CsvRequest(BaseModel):
    text: str


class BackupCreate(BaseModel):
    name: Optional[str] = None


def _to_points(data: List[DataPointModel]) -> List[BoilingDataPoint]:
    return [BoilingDataPoint(p.t_surf, p.q_flux) for p in data]


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


def _backup_summary(backup) -> Dict[str, Any]:
    return {
        "id": backup.id,
        "name": backup.name,
        "created_at": backup.created_at,
        "dataset_count": backup.dataset_count,
    }


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/", response_class=HTMLResponse)
async def root():
    """Root endpoint with API information."""
    return """
    <html>
        <head>
            <title>CoolDecide API</title>
            <style>
                body { font-family: system-ui; max-width: 800px; margin: 50px auto; padding: 20px; }
                h1 { color: #0891b2; }
                a { color: #0891b2; }
                code { background: #f1f5f9; padding: 2px 6px; border-radius: 4px; }
            </style>
        </head>
        <body>
            <h1>CoolDecide API</h1>
            <p>Compare natural, forced-air and immersion cooling for a chip.</p>
            <h2>Quick Links</h2>
            <ul>
                <li><a href="/docs">Interactive API Documentation (Swagger)</a></li>
                <li><a href="/redoc">API Reference (ReDoc)</a></li>
                <li><a href="/health">Health Check</a></li>
            </ul>
            <h2>Key Endpoints</h2>
            <ul>
                <li><code>POST /api/calculate</code> - Compare cooling methods</li>
                <li><code>POST /api/immersion</code> - Immersion cooling detail</li>
                <li><code>POST /api/curves/temperature</code> - Temperature vs heat flux</li>
                <li><code>POST /api/curves/power</code> - Cooling power vs heat flux</li>
                <li><code>GET /api/datasets</code> - Boiling curve datasets</li>
            </ul>
        </body>
    </html>
    """


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
    }


@app.get("/api/fluids")
async def list_fluids():
    """Coolant property table."""
    return {
        "fluids": [
            {"id": key, **vars(fluid)}
            for key, fluid in FLUIDS.items()
        ]
    }


@app.get("/api/surfaces")
async def list_surfaces():
    """Boiling surface table."""
    return {
        "surfaces": [
            {"id": key, **vars(surface)}
            for key, surface in SURFACES.items()
        ]
    }


@app.get("/api/chips")
async def list_chips():
    """Chip presets."""
    return {
        "chips": [
            {
                "name": p.name,
                "tdp_watts": p.tdp_watts,
                "die_area_mm2": p.die_area_mm2,
                "category": p.category,
            }
            for p in CHIP_PRESETS
        ]
    }


@app.get("/api/reference-surfaces")
async def list_reference_surfaces():
    """Literature boiling surfaces available for /api/reference-curve."""
    return {
        "surfaces": [
            {
                "id": key,
                "name": s.name,
                "description": s.description,
                "chf_range_kW_m2": list(s.chf_range),
                "h_range_W_m2K": list(s.h_range),
                "references": list(s.references),
            }
            for key, s in REFERENCE_SURFACES.items()
        ]
    }


@app.post("/api/calculate")
async def calculate(request: CalculateRequest):
    """Compare the selected methods; immersion uses the default bath."""
    result = compute_selected(request.chip.to_spec(), request.methods)
    payload = result.to_dict()
    payload["savings_percent"] = result.energy_savings(CoolingMethod.FORCED, CoolingMethod.IMMERSION)
    return payload


@app.post("/api/immersion")
async def immersion(request: ImmersionRequest):
    """Immersion result for an explicit bath configuration."""
    spec = request.chip.to_spec()
    try:
        result = compute_immersion(spec.tdp_watts, spec.chip_area_mm2, request.immersion.to_params())
    except ValueError as exc:
        raise _bad_request(exc)
    return result.to_dict()


@app.post("/api/curves/temperature")
async def temperature_curve(request: TemperatureCurveRequest):
    """Chip temperature vs heat flux for each method."""
    params = request.immersion.to_params() if request.immersion else None
    try:
        points = generate_temperature_curve(
            request.chip_area_mm2,
            request.max_tdp,
            request.ambient_temp_C,
            request.methods,
            immersion_params=params,
            steps=request.steps or settings.curve_steps,
        )
    except ValueError as exc:
        raise _bad_request(exc)
    return {"points": curve_to_records(points)}


@app.post("/api/curves/power")
async def power_curve(request: PowerCurveRequest):
    """Cooling power vs heat flux for each method."""
    points = generate_power_curve(
        request.chip_area_mm2,
        request.max_tdp,
        request.methods,
        flow_velocity_m_s=request.flow_velocity_m_s,
        steps=request.steps or settings.curve_steps,
    )
    return {"points": curve_to_records(points)}


@app.post("/api/savings")
async def savings(request: SavingsRequest):
    """Cooling power saved by one method relative to another."""
    spec = request.chip.to_spec()
    try:
        params = request.immersion.to_params()
        baseline = compute_method(spec, request.baseline, immersion_params=params)
        improved = compute_method(spec, request.improved, immersion_params=params)
    except ValueError as exc:
        raise _bad_request(exc)

    return {
        "baseline": baseline.to_dict(),
        "improved": improved.to_dict(),
        "savings_percent": energy_savings_percent(baseline, improved),
    }


@app.post("/api/heatsink")
async def heatsink(request: HeatSinkRequest):
    """Air heat sink analysis with optional velocity sweep."""
    spec = request.chip.to_spec()
    config = HeatSinkConfig(
        air_velocity_m_s=request.air_velocity_m_s,
        fan_rpm=request.fan_rpm,
        fan_diameter_mm=request.fan_diameter_mm,
        heatsink_area_cm2=request.heatsink_area_cm2,
        fin_density_fpi=request.fin_density_fpi,
    )
    payload = evaluate_heatsink(spec, config).to_dict()
    if request.include_sweep:
        payload["sweep"] = [vars(p) for p in velocity_sweep(spec, config)]
    return payload


@app.post("/api/reference-curve")
async def reference_curve(request: ReferenceCurveRequest):
    """Place the chip on a literature boiling curve."""
    try:
        point = evaluate_operating_point(
            request.chip.to_spec(),
            request.surface_key,
            request.t_sat_C,
            subcooling_K=request.subcooling_K,
            orientation_deg=request.orientation_deg,
        )
    except ValueError as exc:
        raise _bad_request(exc)
    return point.to_dict()


# ============================================================================
# Datasets
# ============================================================================

@app.get("/api/datasets")
def list_datasets(repository: DatasetRepository = Depends(get_repository)):
    """All stored boiling datasets."""
    return {"datasets": [ds.to_dict() for ds in repository.list()]}


@app.post("/api/datasets", status_code=201)
def create_dataset(
    request: DatasetCreate,
    repository: DatasetRepository = Depends(get_repository),
):
    """Save a new boiling dataset (needs at least two non-blank points)."""
    try:
        points = validate_points(_to_points(request.data))
        experiment = parse_meta(ExperimentMeta, request.experiment)
        literature = parse_meta(LiteratureMeta, request.literature)
    except ValueError as exc:
        raise _bad_request(exc)

    dataset = new_dataset(request.name, request.source, points,
                           experiment=experiment, literature=literature)
    try:
        saved = repository.create(dataset)
    except StorageError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return saved.to_dict()


@app.post("/api/datasets/parse-csv")
async def parse_dataset_csv(request: CsvRequest):
    """Parse pasted or uploaded two-column text without saving it."""
    points = parse_csv(request.text)
    return {
        "points": [p.to_dict() for p in points],
        "sorted": [p.to_dict() for p in sorted(points, key=lambda p: p.t_surf)],
    }


@app.get("/api/datasets/chart")
def datasets_chart(
    ids: str,
    repository: DatasetRepository = Depends(get_repository),
):
    """Overlay rows for the comma-separated dataset ids."""
    try:
        datasets = [repository.get(i) for i in ids.split(",") if i]
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"rows": merge_for_chart(datasets)}


@app.get("/api/datasets/{dataset_id}")
def get_dataset(dataset_id: str, repository: DatasetRepository = Depends(get_repository)):
    try:
        return repository.get(dataset_id).to_dict()
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.patch("/api/datasets/{dataset_id}")
def update_dataset(
    dataset_id: str,
    request: DatasetUpdate,
    repository: DatasetRepository = Depends(get_repository),
):
    changes = request.model_dump(exclude_unset=True)
    try:
        if "data" in changes:
            changes["data"] = validate_points(_to_points(request.data))
        if "experiment" in changes:
            changes["experiment"] = parse_meta(ExperimentMeta, changes["experiment"])
        if "literature" in changes:
            changes["literature"] = parse_meta(LiteratureMeta, changes["literature"])
    except ValueError as exc:
        raise _bad_request(exc)
    try:
        return repository.update(dataset_id, **changes).to_dict()
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StorageError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@app.delete("/api/datasets/{dataset_id}", status_code=204)
def delete_dataset(dataset_id: str, repository: DatasetRepository = Depends(get_repository)):
    try:
        repository.delete(dataset_id)
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return Response(status_code=204)


# ============================================================================
# Backups
# ============================================================================

@app.get("/api/backups")
def list_backups(manager: BackupManager = Depends(get_backup_manager)):
    return {"backups": [_backup_summary(b) for b in manager.list_backups()]}


@app.post("/api/backups", status_code=201)
def create_backup(request: BackupCreate, manager: BackupManager = Depends(get_backup_manager)):
    return _backup_summary(manager.create_backup(request.name))


@app.post("/api/backups/{backup_id}/restore")
def restore_backup(backup_id: str, manager: BackupManager = Depends(get_backup_manager)):
    if not manager.restore_backup(backup_id):
        raise HTTPException(status_code=404, detail="Backup not found")
    return {"restored": backup_id}


@app.get("/api/backups/{backup_id}/export")
def export_backup(backup_id: str, manager: BackupManager = Depends(get_backup_manager)):
    backup = manager.get_backup(backup_id)
    if backup is None:
        raise HTTPException(status_code=404, detail="Backup not found")
    return Response(
        content=manager.export_backup(backup),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{manager.export_filename(backup)}"'},
    )


@app.post("/api/backups/import", status_code=201)
def import_backup(request: CsvRequest, manager: BackupManager = Depends(get_backup_manager)):
    backup = manager.import_backup(request.text)
    if backup is None:
        raise HTTPException(status_code=400, detail="Not a valid backup file")
    return _backup_summary(backup)


@app.delete("/api/backups/{backup_id}", status_code=204)
def delete_backup(backup_id: str, manager: BackupManager = Depends(get_backup_manager)):
    manager.delete_backup(backup_id)
    return Response(status_code=204)


# ============================================================================
# Run server
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
