"""HTTP clients for the orchestrator's external collaborators."""
