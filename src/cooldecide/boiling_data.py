"""
Boiling curve datasets.

A dataset is an ordered list of (surface temperature, heat flux) points
from an experiment or a literature source, with free-text metadata about
the test conditions. Insertion order is kept as entered; sorted views are
built on demand for plotting and validation.

Records written by the browser app use camelCase keys (tSurf, createdAt,
surfaceModification); both spellings are read, snake_case is written.
"""

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging
import re
import uuid

logger = logging.getLogger(__name__)


class DataSource(Enum):
    EXPERIMENT = "experiment"
    LITERATURE = "literature"


@dataclass(frozen=True)
class BoilingDataPoint:
    """One measured point: surface temperature and heat flux."""

    t_surf: float
    q_flux: float

    def to_dict(self) -> Dict[str, float]:
        return {"t_surf": self.t_surf, "q_flux": self.q_flux}


@dataclass
class ExperimentMeta:
    """Conditions recorded for an in-house boiling experiment."""

    # General
    date: Optional[str] = None
    experimenter: Optional[str] = None
    fluid: Optional[str] = None
    subcooling: Optional[str] = None
    pressure: Optional[str] = None
    bulk_fluid_temp: Optional[str] = None
    orientation: Optional[str] = None
    flow_velocity: Optional[str] = None
    trial_number: Optional[str] = None
    # Heater
    heater_material: Optional[str] = None
    heater_size: Optional[str] = None
    heater_geometry: Optional[str] = None
    # Surface
    base_surface: Optional[str] = None
    surface_modification: Optional[str] = None
    structure_width: Optional[str] = None
    structure_spacing: Optional[str] = None
    surface_fraction: Optional[str] = None
    wettability: Optional[str] = None
    pattern_area_ratio: Optional[str] = None
    pattern_spacing: Optional[str] = None
    pattern_thickness: Optional[str] = None
    structure_height: Optional[str] = None
    contact_angle: Optional[str] = None
    ra: Optional[str] = None
    rz: Optional[str] = None
    porosity: Optional[str] = None
    coating_material: Optional[str] = None
    coating_thickness: Optional[str] = None
    wicking_height: Optional[str] = None
    nucleation_site_density: Optional[str] = None
    notes: Optional[str] = None
    # Keys this version does not know about, kept verbatim
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LiteratureMeta:
    """Citation and test conditions for a published boiling curve."""

    # Paper
    title: Optional[str] = None
    authors: Optional[str] = None
    year: Optional[str] = None
    journal: Optional[str] = None
    doi: Optional[str] = None
    # Conditions
    fluid: Optional[str] = None
    subcooling: Optional[str] = None
    pressure: Optional[str] = None
    bulk_fluid_temp: Optional[str] = None
    orientation: Optional[str] = None
    flow_velocity: Optional[str] = None
    # Heater
    heater_material: Optional[str] = None
    heater_size: Optional[str] = None
    heater_geometry: Optional[str] = None
    # Surface
    base_surface: Optional[str] = None
    ra: Optional[str] = None
    rz: Optional[str] = None
    contact_angle: Optional[str] = None
    surface_modification: Optional[str] = None
    pattern_area_ratio: Optional[str] = None
    pattern_spacing: Optional[str] = None
    pattern_thickness: Optional[str] = None
    structure_height: Optional[str] = None
    porosity: Optional[str] = None
    coating_material: Optional[str] = None
    coating_thickness: Optional[str] = None
    wicking_height: Optional[str] = None
    nucleation_site_density: Optional[str] = None
    # Older records used these two instead of the surface section
    surface_type: Optional[str] = None
    surface_roughness: Optional[str] = None
    notes: Optional[str] = None
    # Keys this version does not know about, kept verbatim
    extra: Dict[str, Any] = field(default_factory=dict)


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def snake_case(key: str) -> str:
    """Convert a camelCase key, e.g. bulkFluidTemp -> bulk_fluid_temp."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def _meta_to_dict(meta) -> Optional[Dict[str, Any]]:
    if meta is None:
        return None
    data = {k: v for k, v in asdict(meta).items() if v is not None and k != "extra"}
    for key, value in meta.extra.items():
        data.setdefault(key, value)
    return data


def _split_meta_keys(cls, data: Dict[str, Any]):
    known = {f.name for f in fields(cls)} - {"extra"}
    values, unknown = {}, {}
    for key, value in data.items():
        name = snake_case(key)
        if name in known:
            values[name] = value
        else:
            unknown[key] = value
    return values, unknown


def _meta_from_dict(cls, data: Optional[Dict[str, Any]]):
    """Lenient reader for stored records: unknown keys go to `extra`."""
    if not data:
        return None
    values, unknown = _split_meta_keys(cls, data)
    if unknown:
        logger.debug("Keeping unrecognised %s keys: %s", cls.__name__, ", ".join(unknown))
    return cls(**values, extra=unknown)


def parse_meta(cls, data: Optional[Dict[str, Any]]):
    """
    Strict reader for user input.

    Accepts snake_case or camelCase keys.

    Raises:
        ValueError: If any key is not a field of `cls`
    """
    if not data:
        return None
    values, unknown = _split_meta_keys(cls, data)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} fields: {', '.join(sorted(unknown))}")
    return cls(**values)


def pick_field(data: Dict[str, Any], *keys: str) -> Any:
    """Value of the first of `keys` present in `data`, e.g. snake_case then camelCase."""
    for key in keys:
        if key in data:
            return data[key]
    raise KeyError(keys[0])


@dataclass(frozen=True)
class BoilingDataset:
    """A named boiling curve with provenance metadata."""

    id: str
    name: str
    source: DataSource
    data: List[BoilingDataPoint]
    created_at: str
    experiment: Optional[ExperimentMeta] = None
    literature: Optional[LiteratureMeta] = None

    @property
    def n_points(self) -> int:
        return len(self.data)

    def sorted_by_temperature(self) -> List[BoilingDataPoint]:
        """Points in ascending surface temperature; self.data is untouched."""
        return sorted(self.data, key=lambda p: p.t_surf)

    def with_updates(self, **changes) -> "BoilingDataset":
        """Copy with the given fields replaced. The id cannot change."""
        changes.pop("id", None)
        if "source" in changes:
            changes["source"] = DataSource(changes["source"])
        if "data" in changes:
            changes["data"] = [_coerce_point(p) for p in changes["data"]]
        if isinstance(changes.get("experiment"), dict):
            changes["experiment"] = _meta_from_dict(ExperimentMeta, changes["experiment"])
        if isinstance(changes.get("literature"), dict):
            changes["literature"] = _meta_from_dict(LiteratureMeta, changes["literature"])
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source.value,
            "data": [p.to_dict() for p in self.data],
            "created_at": self.created_at,
            "experiment": _meta_to_dict(self.experiment),
            "literature": _meta_to_dict(self.literature),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoilingDataset":
        return cls(
            id=data["id"],
            name=data["name"],
            source=DataSource(data["source"]),
            data=[_coerce_point(p) for p in data.get("data") or []],
            created_at=pick_field(data, "created_at", "createdAt"),
            experiment=_meta_from_dict(ExperimentMeta, data.get("experiment")),
            literature=_meta_from_dict(LiteratureMeta, data.get("literature")),
        )


def _coerce_point(point) -> BoilingDataPoint:
    if isinstance(point, BoilingDataPoint):
        return point
    if isinstance(point, dict):
        return BoilingDataPoint(
            float(pick_field(point, "t_surf", "tSurf")),
            float(pick_field(point, "q_flux", "qFlux")),
        )
    t_surf, q_flux = point
    return BoilingDataPoint(float(t_surf), float(q_flux))


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_dataset(
    name: str,
    source,
    points: Iterable,
    experiment: Optional[ExperimentMeta] = None,
    literature: Optional[LiteratureMeta] = None,
) -> BoilingDataset:
    """
    Create a dataset with a fresh id and timestamp.

    Args:
        name: Display name
        source: DataSource or its string value
        points: BoilingDataPoint, (t, q) tuples or {"t_surf", "q_flux"} dicts
        experiment: Metadata for experiment datasets
        literature: Metadata for literature datasets

    Returns:
        BoilingDataset with points in the order given
    """
    return BoilingDataset(
        id=str(uuid.uuid4()),
        name=name,
        source=DataSource(source),
        data=[_coerce_point(p) for p in points],
        created_at=utc_now_iso(),
        experiment=experiment,
        literature=literature,
    )


# =============================================================================
# Ingestion
# =============================================================================

_FIELD_SPLIT = re.compile(r"[,\t;]+")
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _leading_float(text: str) -> Optional[float]:
    """Parse the numeric prefix of a field, e.g. "12.5K" -> 12.5."""
    match = _LEADING_NUMBER.match(text.strip())
    if match is None:
        return None
    return float(match.group(0))


def parse_csv(text: str) -> List[BoilingDataPoint]:
    """
    Parse two-column (T_surf, q_flux) text.

    Columns may be separated by commas, tabs or semicolons, so pasted
    spreadsheet cells work too. Header rows and lines without two numeric
    fields are skipped.
    """
    points = []
    for line in text.strip().split("\n"):
        parts = [s.strip() for s in _FIELD_SPLIT.split(line)]
        if len(parts) < 2:
            continue
        t_surf = _leading_float(parts[0])
        q_flux = _leading_float(parts[1])
        if t_surf is not None and q_flux is not None:
            points.append(BoilingDataPoint(t_surf, q_flux))
    return points


def filled_points(points: Iterable[BoilingDataPoint]) -> List[BoilingDataPoint]:
    """Drop blank grid rows, i.e. points that are exactly (0, 0)."""
    return [p for p in points if p.t_surf != 0 or p.q_flux != 0]


def validate_points(points: Iterable[BoilingDataPoint]) -> List[BoilingDataPoint]:
    """
    Return the filled points, requiring at least two of them.

    Raises:
        ValueError: If fewer than two filled points remain
    """
    valid = filled_points(points)
    if len(valid) < 2:
        raise ValueError(f"A boiling curve needs at least 2 points, got {len(valid)}")
    return valid


def surface_fraction_percent(width: Optional[float], spacing: Optional[float]) -> Optional[float]:
    """Patterned area fraction of a 1D stripe pattern, in percent."""
    if not width or not spacing or width + spacing == 0:
        return None
    return round(width / (width + spacing) * 100, 1)


def _meta_number(value: Optional[str]) -> Optional[float]:
    return _leading_float(value) if value else None


def suggest_dataset_name(
    source,
    experiment: Optional[ExperimentMeta] = None,
    literature: Optional[LiteratureMeta] = None,
    surface_fraction: Optional[float] = None,
) -> str:
    """
    Default name for a new dataset.

    Literature: "<FirstAuthorSurname><Year>-<Fluid>", empty if author or
    year is missing. Experiment: "<Modification><Fraction%>-<Fluid>[-T<trial>]".
    The fraction is `surface_fraction` if given, else computed from the
    structure width and spacing, else the recorded surface_fraction text.
    The trial suffix is left off for trial 1.
    """
    if DataSource(source) is DataSource.LITERATURE:
        lit = literature or LiteratureMeta()
        first_author = (lit.authors or "").split(",")[0].strip()
        surname = first_author.split(" ")[0] if first_author else ""
        year = lit.year or ""
        if not surname or not year:
            return ""
        return re.sub(r"\s+", "", f"{surname}{year}-{lit.fluid or ''}")

    exp = experiment or ExperimentMeta()
    modification = (exp.surface_modification or "").split(" ")[0] or "Plain"

    if surface_fraction is None:
        surface_fraction = surface_fraction_percent(
            _meta_number(exp.structure_width), _meta_number(exp.structure_spacing)
        )
    if surface_fraction is not None:
        fraction = f"{surface_fraction:.1f}%"
    else:
        fraction = f"{exp.surface_fraction}%" if exp.surface_fraction else ""

    trial = f"-T{exp.trial_number}" if exp.trial_number and exp.trial_number != "1" else ""
    return re.sub(r"\s+", "", f"{modification}{fraction}-{exp.fluid or ''}{trial}")


def merge_for_chart(datasets: Sequence[BoilingDataset]) -> List[Dict[str, float]]:
    """
    Overlay several datasets on a shared temperature axis.

    Each row holds "t_surf" and, for every dataset with a point at that
    temperature, the flux keyed by dataset id.
    """
    temps = sorted({p.t_surf for ds in datasets for p in ds.data})
    rows = []
    for t in temps:
        row: Dict[str, float] = {"t_surf": t}
        for ds in datasets:
            for p in ds.data:
                if p.t_surf == t:
                    row[ds.id] = p.q_flux
                    break
        rows.append(row)
    return rows
