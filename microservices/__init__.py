"""Microservices of the items web application."""
