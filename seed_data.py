import logging
from sqlmodel import Session, select
from app.db.session import engine, create_db_and_tables
from app.models.product import Product
from app.models.user import User, UserRole
from app.core.security import get_password_hash

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def seed_products(session: Session):
    # Check if products already exist to avoid duplicates
    existing_products = session.exec(select(Product)).all()
    if existing_products:
        logger.info("Database already contains %d products. Skipping seed.", len(existing_products))
        return

    logger.info("Seeding initial products...")
    products = [
        Product(name="Canvas Tote Bag", description="Heavy cotton tote with inner pocket.", price=19.90, main_image="/images/tote.webp"),
        Product(name="Ceramic Mug", description="Stoneware mug, 350 ml.", price=12.50, main_image="/images/mug.webp"),
        Product(name="Notebook A5", description="Dotted pages, lay-flat binding.", price=8.00, main_image="/images/notebook.webp"),
        Product(name="Desk Lamp", description="Dimmable LED lamp with USB-C.", price=49.00, main_image="/images/lamp.webp"),
    ]
    for product in products:
        session.add(product)
    session.commit()
    logger.info("Seeded %d products", len(products))

def seed_admin(session: Session, email: str = "admin@example.com", password: str = "ChangeMe123!"):
    if session.exec(select(User).where(User.email == email)).first():
        logger.info("Admin %s already exists. Skipping.", email)
        return
    session.add(User(
        email=email,
        first_name="Store",
        last_name="Admin",
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN
    ))
    session.commit()
    logger.info("Created admin %s", email)

if __name__ == "__main__":
    create_db_and_tables()
    with Session(engine) as session:
        seed_products(session)
        seed_admin(session)
