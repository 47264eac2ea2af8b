from app import create_app
from models import db, DocumentRole

INITIAL_DOCUMENT_ROLES = [
    "Coordinator",
    "Director",
    "Secretary",
    "Teacher",
]


def init_db(config_object='config.Config'):
    app = create_app(config_object)
    with app.app_context():
        # Create all tables
        db.create_all()

        # Check if roles already exist
        if DocumentRole.query.count() == 0:
            print("Initializing database with document roles...")
            for name in INITIAL_DOCUMENT_ROLES:
                print(f"Adding document role: {name}")
                db.session.add(DocumentRole(name=name))

            try:
                db.session.commit()
                print("Successfully initialized database with document roles!")
            except Exception as e:
                db.session.rollback()
                print(f"Error initializing database: {str(e)}")
        else:
            print("Document roles already exist in database!")

        # Verify roles were added
        print("\nCurrent document roles in database:")
        for role in DocumentRole.query.order_by(DocumentRole.name).all():
            print(f"{role.id}: {role.name}")


if __name__ == '__main__':
    init_db()
