"""Shared core of the GymHub API: settings, persistence, auth and tenancy."""
