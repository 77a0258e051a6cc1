"""Clients for upstream package registries."""
