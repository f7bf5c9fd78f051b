"""Database Layer - declarative base shared by record models."""
