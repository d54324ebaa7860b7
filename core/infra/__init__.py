"""
Infrastructure: HTTP transport, GraphQL client, scheduler and web server.
"""
