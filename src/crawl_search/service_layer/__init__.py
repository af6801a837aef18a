"""Service layer: orchestration over the search core."""
