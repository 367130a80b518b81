"""
Core business logic for hireflow.

Submodules:
- proxy: webhook endpoint resolution and the forwarding service
- ingestion: upload sessions, the per-file pipeline and batch orchestration
"""
