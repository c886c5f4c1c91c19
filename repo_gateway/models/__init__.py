"""
Repository Access Gateway — SQLAlchemy models.

The `db` object is bound to the Flask app in `create_app()` via
`db.init_app(app)`; import it from here, never construct a second one.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
