"""Shared utilities for the marketplace backend.

- auth: token_required / token_optional route decorators
- phone: phone composition and WhatsApp link helpers
- validation: request payload validators
"""
