"""Pydantic request and response schemas for the REST API."""
