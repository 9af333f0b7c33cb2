"""
Services Layer

Business logic services that:
- Accept domain inputs (IDs, sessions, etc.)
- Return domain outputs (models, dataclasses, etc.)
- Do NOT depend on HTTP request/response objects
- Raise courtside.errors exceptions before mutating anything
"""
