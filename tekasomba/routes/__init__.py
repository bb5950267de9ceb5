"""Routes package for the marketplace application."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .auth import auth_bp
    from .products import products_bp, categories_bp
    from .favorites import favorites_bp
    from .messages import messages_bp
    from .profiles import profiles_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(products_bp, url_prefix='/api/products')
    app.register_blueprint(categories_bp, url_prefix='/api/categories')
    app.register_blueprint(favorites_bp, url_prefix='/api/favorites')
    app.register_blueprint(messages_bp, url_prefix='/api/conversations')
    app.register_blueprint(profiles_bp, url_prefix='/api/profiles')
