"""Infrastructure layer - database, transport and collaborator adapters."""
