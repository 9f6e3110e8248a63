"""
Services Layer

Pure business logic services that:
- Accept domain inputs (IDs, sessions, etc.)
- Return domain outputs (models, result objects, etc.)
- Do NOT depend on HTTP request/response objects
- Own their transaction boundary (commit or rollback as one unit)
"""
