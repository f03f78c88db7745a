"""Service layer: mutations, reporting and the workspace store."""
