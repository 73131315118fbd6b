"""Flask extensions initialization."""

from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy


# SQLAlchemy database instance (users and tasks tables)
db = SQLAlchemy()

# Marshmallow instance; task schemas derive from ma.Schema
ma = Marshmallow()
