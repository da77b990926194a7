"""Domain layer for the realm bounded context.

Contains the entity model (users, groups, roles, permissions, domains), the
value objects they are described with, and the authentication callbacks
exchanged with credential connectors. Nothing here depends on connectors or
on the application services.
"""
