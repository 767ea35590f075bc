import shutil
import subprocess
from pathlib import Path

import pytest


class GitRepo:
    """Throwaway Git repository for integration tests."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.git("init")
        self.git("config", "user.name", "Version Test")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            check=True,
            capture_output=True,
            text=True,
        )
        return result.stdout.strip()

    def write(self, name: str, content: str = "") -> None:
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    def commit(self, message: str = "Test commit") -> str:
        self.git("add", ".")
        self.git("commit", "-m", message)
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str) -> None:
        self.git("tag", name)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    """An empty Git repository; skipped when Git is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return GitRepo(tmp_path)
