"""Task service clients: HTTP (api.client) and the in-memory demo (api.offline)."""
