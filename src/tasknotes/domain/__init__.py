"""Domain layer — roles, path templates, creation defaults, parsing.

This layer depends only on stdlib and small pure libraries (pydantic,
ruamel.yaml, python-dateutil). It must never import from services,
infrastructure, commands, or config.
"""
