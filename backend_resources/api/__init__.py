"""HTTP layer: blueprints, bearer authentication and error handlers."""
