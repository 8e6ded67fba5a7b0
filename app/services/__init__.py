"""Domain services shared by the API endpoints."""
