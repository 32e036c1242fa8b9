"""Service layer for BadgeForge."""
