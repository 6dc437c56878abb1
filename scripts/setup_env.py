"""Utility script to scaffold a local .env file."""
from __future__ import annotations

from pathlib import Path

ENV_TEMPLATE = """# Environment configuration for the teacher evaluation service
DEBUG=true
ORGANIZATION_NAME=Centro de Estudios Preuniversitarios - Universidad Nacional de San Agustín
EVIDENCE_MAX_WIDTH=600
EVIDENCE_MAX_HEIGHT=450
GENERATION_TIMEOUT_SECONDS=30
MAX_EVIDENCE_SIZE_MB=10
SERVER_PORT=8000
"""


def main() -> None:
    env_path = Path(".env")
    if env_path.exists():
        print(".env already exists. No changes made.")
        return

    env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
    print("Created .env with default report settings. Please review the file before deployment.")


if __name__ == "__main__":
    main()
