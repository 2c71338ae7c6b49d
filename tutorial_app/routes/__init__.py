from flask import Flask


def register_blueprints(app: Flask) -> None:
    from tutorial_app.routes.tutorial_route import tutorial_bp

    app.register_blueprint(tutorial_bp)
