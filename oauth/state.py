"""OAuth state (nonce) generation"""

import uuid


def generate_state() -> str:
    """Generate an unguessable state value for one login attempt

    Returns:
        UUID v4 string (122 random bits)
    """
    return str(uuid.uuid4())
