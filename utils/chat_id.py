# utils/chat_id.py
import random
import string

CHAT_ID_LENGTH = 16
CHAT_ID_CHARSET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def generate_chat_id() -> str:
    """Random 16-char alphanumeric key. Not checked for uniqueness."""
    return "".join(random.choices(CHAT_ID_CHARSET, k=CHAT_ID_LENGTH))
