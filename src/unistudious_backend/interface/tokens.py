import hmac
import os
from cryptography.fernet import InvalidToken
from keycove import encrypt, decrypt

def _secret_key() -> str:
  return os.environ.get("TOKEN_SECRET")

def decrypt_secret(value: str):
  return decrypt(value,_secret_key())

def encrypt_secret(value: str):
  return encrypt(value,_secret_key())

def verify_password(password: str, stored: str) -> bool:
  if not stored:
    return False
  try:
    return hmac.compare_digest(password.encode("utf-8"), decrypt_secret(stored).encode("utf-8"))
  except (InvalidToken, ValueError):
    return False
