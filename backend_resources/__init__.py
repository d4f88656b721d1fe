"""backend-resources: user-management API over Keycloak.

To use the Flask app:
    from backend_resources.flask_app import create_app

To use the façade without Flask:
    from backend_resources.core.user_management import UserAggregationService
"""
