"""
lotobonheur/models/schemas.py
Pydantic schemas: per-family algorithm parameters, persisted rows and
HTTP request bodies.
"""
from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from lotobonheur.utils.config import WEIGHT_MAX, WEIGHT_MIN
from lotobonheur.utils.errors import RequestValidationError

# ── Algorithm parameters ──────────────────────────────────────────


class ParametersBase(BaseModel):
    """
    Shared behaviour of the parameter families. Each family names its
    learning-rate-like and capacity-like fields so the tuner can adjust
    them without knowing the concrete keys.
    """

    model_config = ConfigDict(extra="forbid")

    BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {}
    LEARNING_FIELD: ClassVar[str] = ""
    CAPACITY_FIELD: ClassVar[str] = ""

    @model_validator(mode="after")
    def _check_bounds(self):
        for name, (lo, hi) in self.BOUNDS.items():
            value = getattr(self, name)
            if not lo <= value <= hi:
                raise ValueError(f"{name}={value} outside [{lo}, {hi}]")
        return self

    @classmethod
    def clamp(cls, name: str, value: float) -> float:
        lo, hi = cls.BOUNDS[name]
        return max(lo, min(hi, value))

    @property
    def learning_rate_value(self) -> float:
        return float(getattr(self, self.LEARNING_FIELD))

    @property
    def capacity_value(self) -> int:
        return int(getattr(self, self.CAPACITY_FIELD))


class StatisticalParameters(ParametersBase):
    kind: Literal["statistical"] = "statistical"
    decay_rate: float = 0.05
    candidate_pool: int = 15
    regularization: float = 0.0

    BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {
        "decay_rate": (0.0, 0.5),
        "candidate_pool": (5, 40),
        "regularization": (0.0, 5.0),
    }
    LEARNING_FIELD: ClassVar[str] = "decay_rate"
    CAPACITY_FIELD: ClassVar[str] = "candidate_pool"


class BoostingParameters(ParametersBase):
    kind: Literal["boosting"] = "boosting"
    learning_rate: float = 0.1
    num_estimators: int = 10
    regularization: float = 1.0

    BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {
        "learning_rate": (0.01, 0.5),
        "num_estimators": (2, 50),
        "regularization": (0.0, 5.0),
    }
    LEARNING_FIELD: ClassVar[str] = "learning_rate"
    CAPACITY_FIELD: ClassVar[str] = "num_estimators"


class SequenceParameters(ParametersBase):
    kind: Literal["sequence"] = "sequence"
    learning_rate: float = 0.6
    window_size: int = 5
    regularization: float = 0.0

    BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {
        "learning_rate": (0.0, 0.95),
        "window_size": (2, 300),
        "regularization": (0.0, 5.0),
    }
    LEARNING_FIELD: ClassVar[str] = "learning_rate"
    CAPACITY_FIELD: ClassVar[str] = "window_size"


AlgorithmParameters = Annotated[
    Union[StatisticalParameters, BoostingParameters, SequenceParameters],
    Field(discriminator="kind"),
]

PARAMETER_FAMILIES: dict[str, type[ParametersBase]] = {
    "statistical": StatisticalParameters,
    "boosting": BoostingParameters,
    "sequence": SequenceParameters,
}

_parameters_adapter: TypeAdapter = TypeAdapter(AlgorithmParameters)


def parse_parameters(raw: dict[str, Any], defaults: dict[str, Any]) -> ParametersBase:
    """Validate stored parameters, filling missing keys (and `kind`) from defaults."""
    merged = {**defaults, **(raw or {})}
    family = PARAMETER_FAMILIES.get(merged.get("kind", ""))
    if family is not None:
        merged = {k: v for k, v in merged.items() if k in family.model_fields}
    return _parameters_adapter.validate_python(merged)


# ── Persisted rows ────────────────────────────────────────────────


class AlgorithmConfig(BaseModel):
    algorithm_name: str
    weight: float = 1.0
    parameters: AlgorithmParameters
    is_enabled: bool = True
    description: Optional[str] = None
    trained: bool = False

    @field_validator("weight")
    @classmethod
    def _clamp_weight(cls, v: float) -> float:
        return max(WEIGHT_MIN, min(WEIGHT_MAX, float(v)))


class PerformanceRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    draw_name: str = ""
    model_used: str
    prediction_date: Optional[str] = None
    draw_date: Optional[str] = None
    predicted_numbers: list[int] = Field(default_factory=list)
    winning_numbers: list[int] = Field(default_factory=list)
    matches_count: int = 0
    accuracy_score: float = 0.0
    confidence_score: Optional[float] = None
    precision_score: Optional[float] = None
    recall_score: Optional[float] = None
    f1_score: Optional[float] = None
    overall_score: Optional[float] = None
    execution_time: Optional[float] = None
    created_at: Optional[str] = None

    @property
    def accuracy(self) -> float:
        """Accuracy as a 0-1 fraction (stored as 0-100)."""
        return self.accuracy_score / 100.0


class TrainingHistoryEntry(BaseModel):
    algorithm_name: str
    training_date: str
    previous_weight: float
    new_weight: float
    previous_parameters: dict[str, Any]
    new_parameters: dict[str, Any]
    performance_improvement: float = 0.0
    training_metrics: dict[str, Any] = Field(default_factory=dict)
    config_updated: bool = False


# ── Request bodies ────────────────────────────────────────────────

DrawName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=50, pattern=r"^[a-zA-Z0-9\s-]+$"),
]


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class PredictionRequest(_Request):
    draw_name: DrawName
    paired_draw_name: Optional[DrawName] = None
    analysis_depth: int = Field(default=300, ge=10, le=1000)
    explain: bool = True


class PatternRequest(_Request):
    draw_name: DrawName
    analysis_depth: int = Field(default=300, ge=10, le=1000)


class BacktestRequest(_Request):
    draw_name: DrawName
    algorithm: Optional[str] = Field(default=None, max_length=64)
    window_size: int = Field(default=50, ge=5, le=200)
    analysis_depth: int = Field(default=300, ge=10, le=1000)


class BestAlgorithmRequest(_Request):
    draw_name: DrawName


class TrainingRequest(_Request):
    draw_name: Optional[DrawName] = None


class RollbackRequest(_Request):
    training_date: str = Field(min_length=1, max_length=64)
    algorithm_name: Optional[str] = Field(default=None, max_length=64)
    confirm: bool = False


class EvaluateRequest(_Request):
    draw_name: Optional[DrawName] = None


def parse_request(model: type[BaseModel], payload: Any) -> Any:
    """Validate a JSON body, raising RequestValidationError with per-field details."""
    if not isinstance(payload, dict):
        raise RequestValidationError("Corps JSON attendu", reason="invalid_json")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        raise RequestValidationError("Requête invalide", reason="validation_error", details=details) from exc
