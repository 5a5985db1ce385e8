"""
Theurgy - Command implementations for the Runic CLI.

Each module corresponds to a top-level CLI command:
- scan:      Discover deployments and report unconfigured chains
- functions: List a deployment's callable functions
- encode:    Print call data without sending anything
- call:      Execute a read or write call
"""
