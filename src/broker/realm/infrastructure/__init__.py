"""Infrastructure layer for the realm bounded context.

Built-in connectors, the connector registry and store configuration loading.
"""
