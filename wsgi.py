import os

from dinesmart import create_app
from dinesmart.database import db
from dinesmart.seed import seed_admin

app = create_app()

# Создание таблиц и администратора при старте
with app.app_context():
    db.create_all()
    seed_admin()

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
