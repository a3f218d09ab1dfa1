"""Business logic layer — blueprints call these, never the models directly."""
