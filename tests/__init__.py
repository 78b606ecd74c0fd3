"""
Test suite for the Blue Carbon registry

- Unit tests for the calculator and anomaly detector
- Storage, ledger and workflow tests against in-memory collaborators
- API endpoint and auth tests via FastAPI TestClient
- CLI tests via click CliRunner
"""
