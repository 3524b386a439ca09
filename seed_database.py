"""
Seed the salon database with the admin account, the built-in discount rules
and the service menu. Safe to run repeatedly, existing rows are left alone.

Usage: python seed_database.py
"""
import logging
import os

from salon_api.database import Base, SessionLocal, engine
from salon_api.models import ROLE_ADMIN, DiscountRule, Service, User
from salon_api.security_utils import hash_password_bcrypt

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

ADMIN_PHONE = os.getenv("SEED_ADMIN_PHONE", "0788456312")
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "Nappyhood.boutique@gmail.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

# name, type, value, is_percentage, description
DISCOUNT_RULES = [
    ("6th Visit Discount", "SIXTH_VISIT", 20, True, "20% discount on every 6th sale"),
    ("Birthday Month Discount", "BIRTHDAY_MONTH", 20, True, "20% discount during birthday month"),
    (
        "Service Combo Discount",
        "SERVICE_COMBO",
        2000,
        False,
        "2000 RWF off when combining shampoo with other services",
    ),
    (
        "Bring Own Product Discount",
        "BRING_OWN_PRODUCT",
        1000,
        False,
        "1000 RWF off when bringing your own products",
    ),
]

# name, category, single, combined (with shampoo), child, child combined
SERVICES = [
    ("Shampoo", "HAIR_TREATMENTS", 7000, None, 9000, None),
    ("Braids Wash", "HAIR_TREATMENTS", 9000, None, 12000, None),
    ("Protein Treatment", "HAIR_TREATMENTS", 10000, 15000, 12000, 17000),
    ("Hydration Deep Treatment", "HAIR_TREATMENTS", 12000, 17000, 14000, 19000),
    ("Fenugreek", "HAIR_TREATMENTS", 10000, 15000, 12000, 17000),
    ("No More Fall", "HAIR_TREATMENTS", 15000, 20000, 14000, 22000),
    ("Bye Bye Dandruff", "HAIR_TREATMENTS", 15000, 20000, 14000, 22000),
    ("Hot Oil Treatment", "HAIR_TREATMENTS", 15000, 20000, 14000, 22000),
    ("Henna Treatment", "HAIR_TREATMENTS", 15000, 20000, 14000, 22000),
    ("Kanta", "HAIR_TREATMENTS", 6000, 12000, None, None),
    ("Chebe Twist", "HAIR_TREATMENTS", 15000, 20000, None, None),
    ("Hair Coloring (Teinture)", "HAIR_TREATMENTS", 15000, None, None, None),
    ("Normal Twist", "TWIST_HAIRSTYLE", 12000, 15000, 12000, 17000),
    ("Small Size Twist", "TWIST_HAIRSTYLE", 20000, 25000, None, None),
    ("Twist Out", "TWIST_HAIRSTYLE", 15000, 20000, None, None),
    ("Twist with Extension", "TWIST_HAIRSTYLE", 40000, 45000, None, None),
    ("Flat Twist with Extension", "TWIST_HAIRSTYLE", 15000, 20000, None, None),
    ("Two Lines Cornrows", "CORNROWS_BRAIDS", 7000, 12000, None, None),
    ("Three Lines Cornrows", "CORNROWS_BRAIDS", 9000, 14000, None, None),
    ("Four Lines Cornrows", "CORNROWS_BRAIDS", 10000, 15000, None, None),
    ("Five Lines Cornrows", "CORNROWS_BRAIDS", 12000, 17000, None, None),
    ("Six to Eight Lines Cornrows", "CORNROWS_BRAIDS", 15000, 20000, None, None),
    ("Nine to Twelve Lines Cornrows", "CORNROWS_BRAIDS", 18000, 24000, None, None),
    ("Cornrows for Wig", "CORNROWS_BRAIDS", 10000, 16000, None, None),
    ("Men Cornrows", "CORNROWS_BRAIDS", 7000, 14000, None, None),
    ("Big Strawset", "STRAWSET_CURLS", 10000, 15000, None, None),
    ("Small Strawset", "STRAWSET_CURLS", 15000, 20000, None, None),
    ("Flexroad/Imiheha", "STRAWSET_CURLS", 20000, 25000, None, None),
    ("Fingerlocs", "STRAWSET_CURLS", 20000, 25000, None, None),
    ("Styling without Extension", "STYLING_SERVICE", 7000, 12000, None, None),
    ("Styling with Extension", "STYLING_SERVICE", 10000, 15000, None, None),
    ("Braids & Dreadlocks", "STYLING_SERVICE", 9000, 15000, None, None),
    ("Bride Styling", "STYLING_SERVICE", 20000, 25000, None, None),
    ("Silk Press (Flat, Trim)", "STYLING_SERVICE", 10000, 15000, None, None),
    ("Blow Drying", "STYLING_SERVICE", 3000, None, None, None),
    ("DIY Treatment/Kanta Service", "SPECIAL_OFFERS", 10000, None, None, None),
]

DEFAULT_DURATION_MINUTES = 60


def seed_admin(db) -> None:
    if db.query(User).filter(User.phone == ADMIN_PHONE).first():
        logger.info("Admin user already exists")
        return
    db.add(
        User(
            name="Nappyhood Admin",
            email=ADMIN_EMAIL,
            phone=ADMIN_PHONE,
            role=ROLE_ADMIN,
            password_hash=hash_password_bcrypt(ADMIN_PASSWORD),
        )
    )
    if "SEED_ADMIN_PASSWORD" not in os.environ:
        logger.warning("⚠️ Admin created with the default password, change it after first login")
    logger.info("✅ Created admin user")


def seed_discount_rules(db) -> None:
    created = 0
    for name, discount_type, value, is_percentage, description in DISCOUNT_RULES:
        if db.query(DiscountRule).filter(DiscountRule.type == discount_type).first():
            continue
        db.add(
            DiscountRule(
                name=name,
                type=discount_type,
                value=value,
                is_percentage=is_percentage,
                description=description,
                apply_to_all_services=True,
            )
        )
        created += 1
    logger.info(f"✅ Created {created} discount rules")


def seed_services(db) -> None:
    created = 0
    for name, category, single, combined, child, child_combined in SERVICES:
        if db.query(Service).filter(Service.name == name).first():
            continue
        db.add(
            Service(
                name=name,
                category=category,
                description=name,
                single_price=single,
                combined_price=combined,
                child_price=child,
                child_combined_price=child_combined,
                duration=DEFAULT_DURATION_MINUTES,
                is_combo_eligible=combined is not None,
            )
        )
        created += 1
    logger.info(f"✅ Created {created} salon services")


def main() -> None:
    logger.info("🌱 Starting database seeding...")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        seed_admin(db)
        seed_discount_rules(db)
        seed_services(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    logger.info("🎉 Seeding finished")


if __name__ == "__main__":
    main()
