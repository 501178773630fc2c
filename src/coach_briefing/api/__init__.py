"""HTTP API for the Coach Briefing service."""
