"""Pump - incremental importer for Last.fm listening history."""
