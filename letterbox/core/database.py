from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text

# Bound to an app in Letterbox.init_app
db = SQLAlchemy()


def ping():
    """Round-trip a trivial query; raises if the database is unreachable."""
    db.session.execute(text('SELECT 1'))
