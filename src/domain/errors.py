class DuplicateSlugError(Exception):
    """A post with the same (slug, language) already exists."""

    def __init__(self, slug: str, language: str) -> None:
        super().__init__(f"Post with slug '{slug}' and language '{language}' already exists")
        self.slug = slug
        self.language = language


class DuplicateEmailError(Exception):
    """A user with the same email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email
