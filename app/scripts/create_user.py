import argparse

from app.database import SessionLocal
from app.models.user import User
from app.services.passwords import hash_password
from app.utils.constants import ROLES

def main():
    parser = argparse.ArgumentParser(description="Create a login for the jobs API.")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--role", choices=sorted(ROLES), default="member")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        email = args.email.lower().strip()
        if db.query(User).filter(User.email == email).first():
            raise SystemExit(f"User {email} already exists")
        user = User(email=email, password_hash=hash_password(args.password), role=args.role)
        db.add(user)
        db.commit()
        print({"id": str(user.id), "email": user.email, "role": user.role})
    finally:
        db.close()

if __name__ == "__main__":
    main()
