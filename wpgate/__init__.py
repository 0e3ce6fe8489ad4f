"""Resource gating for headless WordPress deployments.

The core (`wpgate.authz`) is pure: callers hand it a catalog snapshot plus
allow/deny configuration and get back a decision or a suppression map.
"""
