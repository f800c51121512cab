"""JSON API blueprints, all mounted under /api."""
