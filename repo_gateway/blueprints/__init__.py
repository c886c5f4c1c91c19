"""
Repository Access Gateway
Blueprint registry.
"""
