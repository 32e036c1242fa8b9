"""BadgeForge: X login, stateless sessions and campaign badges."""
