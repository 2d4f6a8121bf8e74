"""GymHub HTTP API."""
