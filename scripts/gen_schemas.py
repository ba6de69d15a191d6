# scripts/gen_schemas.py
"""
Generate JSON Schemas for allocheck data models.

This script exports JSON Schema files for:
    - Client, Worker, Task (input rows)
    - ValidationError (finding record)
    - Config

Output directory: schemas/
"""

import json
from pathlib import Path

from allocheck.schemas.models import Client, Config, Task, ValidationError, Worker

MODELS = {
    "client": Client,
    "worker": Worker,
    "task": Task,
    "validation_error": ValidationError,
    "config": Config,
}


def export_schema(model_cls, name: str, out_dir: Path) -> Path:
    """
    @brief
    Writes `<name>.schema.json` for one pydantic model.

    @details
    Schemas are generated in serialization mode so that column aliases
    (ClientID, Duration, ...) appear as property names.

    @returns
        Absolute path of the written schema file.
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    schema_path = (out_dir / f"{name}.schema.json").resolve()
    schema = model_cls.model_json_schema(by_alias=True, mode="serialization")

    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"Generated {rel}")
    return schema_path


def main() -> None:
    out_dir = Path("schemas").resolve()
    for name, model_cls in MODELS.items():
        export_schema(model_cls, name, out_dir)


if __name__ == "__main__":
    main()
