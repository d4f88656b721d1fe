"""Core Business Logic Module

Framework-independent user management over Keycloak.

Module Structure:
    - keycloak/           : Low-level Keycloak Admin API client
    - gateway.py          : create / fetch-profile / fetch-roles-and-groups adapter
    - user_management.py  : UserAggregationService (validation, aggregation, error mapping)
    - errors.py           : Error taxonomy and Result values
    - models.py           : Request-scoped value objects
    - rbac.py             : Role collection and role guard
    - validators.py       : User-creation payload validation
"""
