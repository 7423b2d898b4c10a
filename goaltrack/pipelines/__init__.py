"""
Pipeline functions: stateless orchestration between services and callers.
"""
