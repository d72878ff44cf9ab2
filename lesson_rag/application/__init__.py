"""Application layer: lifecycle, search and chat orchestration services."""
