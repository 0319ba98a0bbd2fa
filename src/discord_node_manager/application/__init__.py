"""
Application Layer

Wires the domain to the node connection:
- manager: the public entry point owning the node and the session registry
- router: gateway -> node and node -> session/subscriber routing
- search: search request and result normalization
- session: per-guild session
"""
