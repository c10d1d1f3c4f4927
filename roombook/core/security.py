from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_and_upgrade(password: str, hashed: str):
    """Check a password and return (ok, new_hash).

    ``new_hash`` is set when the stored hash uses outdated argon2 parameters.
    """
    return pwd_context.verify_and_update(password, hashed)
