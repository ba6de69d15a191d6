# src/allocheck/schemas/models.py
"""
@brief
Pydantic data models for the allocheck validation project.

@details
Defines the canonical model types:
    - Client / Worker / Task: column layout of one uploaded spreadsheet row
    - ValidationError: immutable finding produced by the validation engine
    - Config: runtime configuration (from config.yaml)

Record models stay permissive (unknown columns are kept, values are untyped)
because the engine itself is responsible for reporting malformed cells.
Each record class also describes which columns carry its identity, its numeric
domain field and its structured-text field; validators read these descriptors
instead of hard-coding column names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

TableName = Literal["clients", "workers", "tasks"]
TABLES: tuple[str, ...] = ("clients", "workers", "tasks")


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration contracts.

    @details
    Forbids unknown fields and preserves exact naming rules.
    """

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown fields
        populate_by_name=True,  # Allow population by field name
        use_enum_values=True,  # Export raw enum values
    )


class _RecordModel(BaseModel):
    """
    @brief
    Base model for one spreadsheet row.

    @details
    Columns are addressed by their spreadsheet header (alias) and exposed as
    snake_case attributes; extra columns are allowed. The engine works on raw
    row mappings and reads only the class-level column descriptors; the field
    definitions document the sheet layout in the JSON Schemas.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    table: ClassVar[str]
    id_field: ClassVar[str]
    numeric_field: ClassVar[str]
    structured_field: ClassVar[str]

    row_index: int | None = Field(None, alias="id", description="Positional index from ingestion")


class Client(_RecordModel):
    """One row of the clients sheet."""

    table: ClassVar[str] = "clients"
    id_field: ClassVar[str] = "ClientID"
    numeric_field: ClassVar[str] = "PriorityLevel"
    structured_field: ClassVar[str] = "AttributesJSON"

    client_id: Any = Field("", alias="ClientID")
    client_name: Any = Field("", alias="ClientName")
    priority_level: Any = Field("", alias="PriorityLevel")
    requested_task_ids: Any = Field("", alias="RequestedTaskIDs")
    group_tag: Any = Field("", alias="GroupTag")
    attributes_json: Any = Field("", alias="AttributesJSON")


class Worker(_RecordModel):
    """One row of the workers sheet."""

    table: ClassVar[str] = "workers"
    id_field: ClassVar[str] = "WorkerID"
    numeric_field: ClassVar[str] = "MaxLoadPerPhase"
    structured_field: ClassVar[str] = "AvailableSlots"
    skills_field: ClassVar[str] = "Skills"

    worker_id: Any = Field("", alias="WorkerID")
    worker_name: Any = Field("", alias="WorkerName")
    skills: Any = Field("", alias="Skills")
    available_slots: Any = Field("", alias="AvailableSlots")
    max_load_per_phase: Any = Field("", alias="MaxLoadPerPhase")
    worker_group: Any = Field("", alias="WorkerGroup")
    qualification_level: Any = Field("", alias="QualificationLevel")


class Task(_RecordModel):
    """One row of the tasks sheet."""

    table: ClassVar[str] = "tasks"
    id_field: ClassVar[str] = "TaskID"
    numeric_field: ClassVar[str] = "Duration"
    structured_field: ClassVar[str] = "PreferredPhases"
    skills_field: ClassVar[str] = "RequiredSkills"

    task_id: Any = Field("", alias="TaskID")
    task_name: Any = Field("", alias="TaskName")
    category: Any = Field("", alias="Category")
    duration: Any = Field("", alias="Duration")
    required_skills: Any = Field("", alias="RequiredSkills")
    preferred_phases: Any = Field("", alias="PreferredPhases")
    max_concurrent: Any = Field("", alias="MaxConcurrent")


RECORD_MODELS: dict[str, type[_RecordModel]] = {
    "clients": Client,
    "workers": Worker,
    "tasks": Task,
}


class ErrorKind(str, Enum):
    """Taxonomy of validation findings."""

    REQUIRED = "required"
    DUPLICATE = "duplicate"
    DOMAIN = "domain"
    FORMAT = "format"
    OVERLOAD = "overload"
    SATURATION = "saturation"
    COVERAGE = "coverage"


class ValidationError(BaseModel):
    """
    @brief
    One validation finding.

    @details
    Immutable value object. `row` holds the natural identifier of the offending
    row when present, otherwise its positional index, or -1 for aggregate
    findings that no single row is responsible for.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    table: TableName
    row: str | int | float = Field(..., description="Natural id, positional index, or -1")
    field: str = Field(..., description="Offending (or most relevant) column")
    message: str
    kind: ErrorKind

    def cell(self) -> tuple[str, str | int | float, str]:
        """Key used for per-cell highlighting."""
        return (self.table, self.row, self.field)


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class IOPolicy(_StrictBaseModel):
    """
    @brief
    Controls which artifacts the pipeline writes.
    """

    write_report: bool = Field(True, description="Write validation_report.json")
    write_metrics: bool = Field(True, description="Write metrics.json")
    write_plot: bool = Field(True, description="Render phase_balance.png")


class ExportConfig(_StrictBaseModel):
    """
    @brief
    Controls table CSV export.

    @details
    With `require_clean` enabled, export is refused while any validation
    error exists.
    """

    require_clean: bool = Field(True, description="Refuse export while errors exist")
    tables: list[TableName] = Field(
        default_factory=lambda: ["clients", "workers", "tasks"],
        description="Tables written by export_tables()",
    )


class VisualConfig(_StrictBaseModel):
    """Figure dimensions and DPI for the phase balance chart."""

    width: float = Field(10.0, gt=0.0, description="Figure width in inches")
    height: float = Field(5.0, gt=0.0, description="Figure height in inches")
    dpi: int = Field(120, ge=50, description="Output figure DPI")


class Config(_StrictBaseModel):
    """
    @brief
    Full runtime configuration loaded from config.yaml.
    """

    input_paths: list[str] = Field(default_factory=list, description="Workbook/CSV inputs")
    output_dir: str = Field("data/output", description="Directory for generated artifacts")
    io_policy: IOPolicy = Field(default_factory=IOPolicy)
    export: ExportConfig = Field(default_factory=ExportConfig)
    visual: VisualConfig = Field(default_factory=VisualConfig)


__all__ = [
    "TABLES",
    "TableName",
    "Client",
    "Worker",
    "Task",
    "RECORD_MODELS",
    "ErrorKind",
    "ValidationError",
    "IOPolicy",
    "ExportConfig",
    "VisualConfig",
    "Config",
]
