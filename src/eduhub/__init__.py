"""EduHub student application platform API."""
