from collections.abc import Iterable, Iterator


class PasswordPresets:
    """Ordered set of stored candidate passwords, tried before prompting."""

    def __init__(self, passwords: Iterable[str] = ()) -> None:
        self._passwords: list[str] = []
        for password in passwords:
            self.add(password)

    def add(self, password: str) -> bool:
        """Append *password*; blanks and duplicates are ignored. Returns True if added."""
        candidate = password.strip()
        if not candidate or candidate in self._passwords:
            return False
        self._passwords.append(candidate)
        return True

    def remove(self, password: str) -> None:
        if password in self._passwords:
            self._passwords.remove(password)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._passwords))

    def __len__(self) -> int:
        return len(self._passwords)

    def __contains__(self, password: object) -> bool:
        return password in self._passwords
