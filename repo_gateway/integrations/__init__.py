"""repo_gateway.integrations — External service gateway modules.

All outbound HTTP calls to third-party APIs must go through a gateway
in this package, never via bare `requests` calls in services or blueprints.

Every call is:
  - Authenticated (token injected by the gateway)
  - Bounded by an explicit timeout
  - Logged with status and latency
  - Returned as a structured result instead of raising

Current gateways:
  github_gateway.GitHubGateway — GitHub REST API v3
"""
