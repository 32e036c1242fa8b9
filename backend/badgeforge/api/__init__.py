"""API routers for BadgeForge."""
