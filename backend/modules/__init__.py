"""
Feature modules for the anonchat client core.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's collaborators
- models.py: Pydantic models for data transfer
- service.py: Orchestration logic
- repository.py: Supabase row access (where the module owns a table)
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
"""
