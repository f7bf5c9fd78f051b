"""Services Layer - async orchestration: the resolver, the CRUD recipe, the facade."""
