import logging
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_marshmallow import Marshmallow
from flask_cors import CORS
from flasgger import Swagger
from sqlalchemy.orm import DeclarativeBase

from config import Config
from utils.errors import DomainError

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)

# Create base model class
class Base(DeclarativeBase):
    pass

# Initialize extensions
db = SQLAlchemy(model_class=Base)
ma = Marshmallow()
jwt = JWTManager()
migrate = Migrate()

def create_app(config_object='config.Config'):
    # Create and configure the app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_object)

    # Initialize extensions with app
    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    # Enable CORS
    CORS(app)

    # Configure Swagger
    swagger_config = {
        "headers": [],
        "specs": [
            {
                "endpoint": "apispec",
                "route": "/apispec.json",
                "rule_filter": lambda rule: True,
                "model_filter": lambda tag: True,
            }
        ],
        "static_url_path": "/flasgger_static",
        "swagger_ui": True,
        "specs_route": "/api/docs/"
    }

    Swagger(app, config=swagger_config, template={
        "swagger": "2.0",
        "info": {
            "title": "SkillMatrix API",
            "description": "Skill tracking and project staffing API",
            "version": "1.0.0"
        },
        "securityDefinitions": {
            "Bearer": {
                "type": "apiKey",
                "name": "Authorization",
                "in": "header",
                "description": "JWT Authorization header using the Bearer scheme. Example: \"Authorization: Bearer {token}\""
            }
        },
        "security": [
            {
                "Bearer": []
            }
        ]
    })

    # Import models to ensure they're registered with SQLAlchemy
    from models import (
        User, Department, EmployeeProfile, Skill, Project, Deliverable,
        DeliverableSkill, EmployeeSkill, SkillProgressLog,
        AssignmentRequest, EmployeeProjectAssignment
    )

    # Register blueprints
    from routes.auth import auth_bp
    from routes.employees import employees_bp, departments_bp
    from routes.skills import skills_bp
    from routes.employee_skills import employee_skills_bp
    from routes.projects import projects_bp
    from routes.deliverables import deliverables_bp
    from routes.assignments import assignments_bp
    from routes.recommendations import recommendations_bp
    from routes.analytics import analytics_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(departments_bp, url_prefix='/api/departments')
    app.register_blueprint(employees_bp, url_prefix='/api/employees')
    app.register_blueprint(skills_bp, url_prefix='/api/skills')
    app.register_blueprint(employee_skills_bp, url_prefix='/api/employee-skills')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')
    app.register_blueprint(deliverables_bp, url_prefix='/api')
    app.register_blueprint(assignments_bp, url_prefix='/api')
    app.register_blueprint(recommendations_bp, url_prefix='/api')
    app.register_blueprint(analytics_bp, url_prefix='/api/analytics')

    # Domain errors raised by the service layer
    @app.errorhandler(DomainError)
    def domain_error(e):
        db.session.rollback()
        logger.info("Request failed with %s: %s", type(e).__name__, e.message)
        return {"success": False, "error": e.message}, e.status_code

    # Create error handlers
    @app.errorhandler(400)
    def bad_request(e):
        return {"success": False, "error": "Bad request", "message": str(e)}, 400

    @app.errorhandler(401)
    def unauthorized(e):
        return {"success": False, "error": "Unauthorized", "message": str(e)}, 401

    @app.errorhandler(403)
    def forbidden(e):
        return {"success": False, "error": "Forbidden", "message": str(e)}, 403

    @app.errorhandler(404)
    def not_found(e):
        return {"success": False, "error": "Not found", "message": str(e)}, 404

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        logger.error("Unhandled error: %s", getattr(e, 'original_exception', e))
        return {"success": False, "error": "Internal server error"}, 500

    # Create database tables
    with app.app_context():
        db.create_all()
        logger.debug("Database tables created")

    return app

app = create_app()
