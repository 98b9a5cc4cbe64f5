from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow():
    # Храним время в UTC без tzinfo: SQLite не сохраняет смещение
    return datetime.now(timezone.utc).replace(tzinfo=None)
