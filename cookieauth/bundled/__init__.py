"""Bundled collaborator implementations for cookie authentication."""
