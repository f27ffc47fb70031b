"""Shared helpers: exceptions, logging, validation, time handling."""
