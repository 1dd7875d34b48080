"""Pydantic models for the Cloudflare Workers versions API."""
