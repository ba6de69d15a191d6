from allocheck.validator.cross_checks import (
    PhaseBalance,
    check_phase_saturation,
    check_skill_coverage,
    compute_phase_balance,
)
from allocheck.validator.entity_validators import (
    validate_clients,
    validate_table,
    validate_tasks,
    validate_workers,
)

__all__ = [
    "PhaseBalance",
    "check_phase_saturation",
    "check_skill_coverage",
    "compute_phase_balance",
    "validate_clients",
    "validate_table",
    "validate_tasks",
    "validate_workers",
]
