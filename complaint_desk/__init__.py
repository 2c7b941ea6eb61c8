"""Complaint management backend."""
