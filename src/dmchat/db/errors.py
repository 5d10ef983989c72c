class DuplicateIdentity(Exception):
    def __init__(self, username: str) -> None:
        super().__init__(f"Username {username!r} is already registered")
        self.username = username
