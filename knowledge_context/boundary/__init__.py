"""Boundary adapters: relational store, vector search and shared cache."""
