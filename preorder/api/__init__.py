"""
Preorder REST API.

Provides DRF views for:
- Order (public submit and lookup, operator list/status actions/delete)
- Pickup info (public)
- Health check
"""
