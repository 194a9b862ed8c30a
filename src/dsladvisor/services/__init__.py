"""Service layer: pipeline orchestration, persistence and feedback."""
