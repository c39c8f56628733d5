"""Application services used by the run orchestrator."""
