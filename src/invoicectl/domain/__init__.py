"""Domain layer: the invoice model, its status machine, and shared aliases.

Nothing here imports from services, infrastructure, commands or config;
pydantic is the only third-party dependency.
"""
