import os
from waitress import serve
from asset_catalog import create_app, db
from asset_catalog.seed import seed_db

app = create_app()

# Initialize and seed the database
with app.app_context():
    db.create_all()
    seed_db()

if __name__ == '__main__':
    serve(app, host=os.environ.get('HOST', '0.0.0.0'), port=int(os.environ.get('PORT', 5000)))
