from flask import Flask
from .gcp_clients import init_services
from .routes import main_bp

def create_app(init_clients: bool = True):
    app = Flask(__name__)
    
    # Initialize Global Services
    if init_clients:
        init_services()
    
    # Register Blueprints
    app.register_blueprint(main_bp)
    
    return app
