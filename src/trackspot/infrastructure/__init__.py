"""Infrastructure layer: integrations, persistence, storage and observability."""
