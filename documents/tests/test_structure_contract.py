"""Structure contract tests for the documents feature."""
from __future__ import annotations

from pathlib import Path


def test_structure_contract() -> None:
    """Fail if required scaffold files are missing."""
    root = Path(__file__).resolve().parents[1]
    required = [
        root / "enum" / "template_status.py",
        root / "models" / "template.py",
        root / "models" / "activity_log_entry.py",
        root / "models" / "mappers.py",
        root / "logic" / "lifecycle.py",
        root / "logic" / "activity_log.py",
        root / "logic" / "migrations.py",
        root / "logic" / "setup_service.py",
        root / "logic" / "signing_service.py",
        root / "logic" / "signing_links.py",
        root / "repository" / "template_store.py",
        root / "repository" / "memory_template_store.py",
        root / "repository" / "sqlite_template_store.py",
        root / "repository" / "template_repository.py",
        root / "exceptions" / "errors.py",
        root / "tests" / "test_structure_contract.py",
        root / "tests" / "test_lifecycle.py",
        root / "tests" / "test_signing_workflow.py",
    ]
    missing = [path for path in required if not path.exists()]
    assert not missing, f"Missing required files: {missing}"
