# ===================================
# app/core/security.py
# ===================================

from passlib.context import CryptContext

from app.core.config import settings

# Configuration du hachage des mots de passe
pwd_context = CryptContext(schemes=[settings.password_hash_scheme], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Vérifier un mot de passe"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hasher un mot de passe"""
    return pwd_context.hash(password)
