from flask_sqlalchemy import SQLAlchemy

# Extensions are created once and initialized in create_app().
db = SQLAlchemy()
