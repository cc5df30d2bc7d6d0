import random
import string

# 26 lowercase + 26 uppercase; 52^6 ≈ 2×10^10 candidates at the default length
ALPHABET = string.ascii_lowercase + string.ascii_uppercase
DEFAULT_LENGTH = 6

# Seeded once from OS entropy for the life of the process
_rng = random.SystemRandom()


def random_token(length: int = DEFAULT_LENGTH) -> str:
    return "".join(_rng.choices(ALPHABET, k=length))

